"""
Main CLI entry point for cmbemu.
"""

import argparse
import json
import sys
from pathlib import Path

from cmbemu.core.logging_config import setup_logging, get_logger

logger = get_logger("cli.main")


def _parse_assignment(text: str):
    if "=" not in text:
        raise ValueError(f"Expected name=value, got: {text}")
    name, value = text.split("=", 1)
    return name.strip(), float(value)


def validate_cmd(args):
    """Package validation command."""
    from cmbemu.core.exceptions import ValidationError
    from cmbemu.package.validator import validate

    try:
        validate(args.package)
    except ValidationError as e:
        logger.error(f"{args.package}: {e}")
        print(f"INVALID: {e.user_message}")
        sys.exit(1)

    print(f"OK: {args.package} is a valid model package")


def info_cmd(args):
    """Package summary command."""
    from cmbemu.package.loader import load_package

    package = load_package(args.package)

    print(f"Model package: {args.package}")
    print(f"  Model size: {len(package.model_bytes)} bytes")
    print(f"  Parameters ({len(package.sliders)}):")
    for spec, default in zip(package.sliders, package.defaults):
        flag = "" if spec.usable else "  [unusable]"
        print(
            f"    {spec.name:<16} [{spec.format(spec.minimum)}, {spec.format(spec.maximum)}] "
            f"step {spec.step:g}  default {spec.format(default)}{flag}"
        )
    print(f"  Spectra: {', '.join(package.spectrum_labels)}")
    for key, values in package.coordinates.items():
        print(f"  Coordinates '{key}': {len(values)} values")


def predict_cmd(args):
    """Run the emulator and output one spectrum."""
    from cmbemu.core.config import EmulatorConfig
    from cmbemu.io.spectrum import save_curve
    from cmbemu.session import EmulatorSession

    config = EmulatorConfig.from_file(Path(args.config)) if args.config else EmulatorConfig()
    if args.spectrum:
        config.spectrum = args.spectrum.upper()
    config.validate()

    session = EmulatorSession(config)
    session.open(args.package)
    if session.engine is None:
        raise RuntimeError(session.status)

    for assignment in args.param or []:
        name, value = _parse_assignment(assignment)
        stored = session.set_parameter(name, value, update=False)
        logger.info(f"{name} = {stored}")

    if args.spectrum:
        session.select_spectrum(args.spectrum, update=False)

    curve = session.update_curve()
    if not curve:
        raise RuntimeError(f"No curve produced: {session.status}")

    display = None
    if args.display:
        display = session.axis.to_display([p.coordinate for p in curve])

    if args.output:
        save_curve(args.output, curve, display_coordinates=display)
        print(f"{session.selected} spectrum saved to {args.output}")
    else:
        print(f"# l, {session.selected}" + (", display" if display is not None else ""))
        for i, point in enumerate(curve):
            line = f"{point.coordinate:g},{point.value:.6e}"
            if display is not None:
                line += f",{display[i]:.6f}"
            print(line)


def ticks_cmd(args):
    """Print the multipole axis ticks."""
    from cmbemu.core.config import EmulatorConfig
    from cmbemu.spectra.axis import AxisMapper

    config = EmulatorConfig.from_file(Path(args.config)) if args.config else EmulatorConfig()
    config.validate()
    mapper = AxisMapper.from_config(config)

    major_raw, minor_raw = mapper.tick_values()
    major, minor = mapper.ticks()
    result = {
        "major": [
            {"l": l, "position": pos, "label": label}
            for l, pos, label in zip(major_raw, major, mapper.major_tick_labels())
        ],
        "minor": [{"l": l, "position": pos} for l, pos in zip(minor_raw, minor)],
    }
    print(json.dumps(result, indent=2))


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="cmbemu: CMB power-spectrum emulator model packages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser("validate", help="Check that a file is a model package")
    validate_parser.add_argument("package", type=str, help="Path to model package")
    validate_parser.set_defaults(func=validate_cmd)

    info_parser = subparsers.add_parser("info", help="Describe a model package")
    info_parser.add_argument("package", type=str, help="Path to model package")
    info_parser.set_defaults(func=info_cmd)

    predict_parser = subparsers.add_parser("predict", help="Evaluate the emulator for one spectrum")
    predict_parser.add_argument("package", type=str, help="Path to model package")
    predict_parser.add_argument(
        "--spectrum", type=str, default=None, help="Spectrum label, e.g. TT (default: TT)"
    )
    predict_parser.add_argument(
        "--param",
        type=str,
        action="append",
        default=None,
        help="Parameter override name=value (repeatable; others use best-fit values)",
    )
    predict_parser.add_argument(
        "--config", type=str, default=None, help="Path to configuration file (YAML or JSON)"
    )
    predict_parser.add_argument(
        "--display", action="store_true", help="Add plot-space multipole coordinates"
    )
    predict_parser.add_argument(
        "--output", type=str, default=None, help="Output file path (default: print to stdout)"
    )
    predict_parser.set_defaults(func=predict_cmd)

    ticks_parser = subparsers.add_parser("ticks", help="Print multipole axis tick positions")
    ticks_parser.add_argument(
        "--config", type=str, default=None, help="Path to configuration file (YAML or JSON)"
    )
    ticks_parser.set_defaults(func=ticks_cmd)

    args = parser.parse_args()

    # Setup logging
    setup_logging(level=args.log_level)

    # Execute command
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except Exception as e:
        logger.error(f"Error executing command: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
