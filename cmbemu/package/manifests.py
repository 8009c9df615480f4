"""
Parsers for the text manifests of a model package.

All manifests are UTF-8 text, one record per line, fields separated by
``", "``. Parsing is lenient: blank lines and lines with missing or
non-numeric fields are skipped (logged at debug level). Structural problems,
such as a manifest without any usable record, raise
``ManifestMalformedError``.

Manifests
---------
input_names.txt
    ``name, xmin, xmax, deltax`` per model input, in input order
x_values.txt
    Coordinate groups: a non-numeric line (``"Cl:"``) opens a group, numeric
    lines append to it
output_indices.txt
    ``name, i_start, i_end`` per output block; ``derived*`` names are ignored
best_fit.txt
    ``name, value`` per model input
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from cmbemu.core import constants
from cmbemu.core.exceptions import ManifestMalformedError
from cmbemu.core.logging_config import get_logger
from cmbemu.package.structures import OutputRange, ScaleRule, SliderSpec

logger = get_logger("package.manifests")


def _fields(line: str) -> List[str]:
    return [field.strip() for field in line.split(constants.MANIFEST_DELIMITER)]


def _parse_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


def _records(text: str):
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if line:
            yield lineno, line


def step_decimals(step: float) -> int:
    """
    Number of decimal digits needed to display multiples of ``step``.

    The count is the length of the shortest decimal form of ``step`` minus
    two, so integer digits count as well (0.01 -> 2, 2.5 -> 1, 10.0 -> 2).
    A step of exactly 1.0 needs no decimals. Steps whose shortest form is in
    exponent notation are expanded first (1e-05 -> 0.00001 -> 5).

    Parameters
    ----------
    step : float
        Slider increment

    Returns
    -------
    int
        Digit count, never negative
    """
    step = abs(float(step))
    if step == 1.0:
        return 0
    if not np.isfinite(step):
        return 0
    text = repr(step)
    if "e" in text or "E" in text:
        try:
            text = format(Decimal(text), "f")
        except InvalidOperation:
            return 0
        if "." not in text:
            return 0
        return len(text.split(".", 1)[1])
    return max(len(text) - 2, 0)


def parse_input_manifest(text: str) -> List[SliderSpec]:
    """
    Parse ``input_names.txt`` into slider specifications.

    The range bounds are rounded to the precision derived from the step so
    that the range matches what the slider can display. A line whose range is
    empty (``xmin >= xmax``) still yields a spec, flagged unusable through
    ``SliderSpec.usable``.

    Parameters
    ----------
    text : str
        Manifest contents

    Returns
    -------
    list of SliderSpec
        One spec per valid line, in file order
    """
    sliders: List[SliderSpec] = []
    seen = set()
    for lineno, line in _records(text):
        fields = _fields(line)
        if len(fields) < 4:
            logger.debug(f"input manifest line {lineno}: expected 4 fields, skipping")
            continue

        name = fields[0]
        xmin, xmax, step = (_parse_float(f) for f in fields[1:4])
        if not name or xmin is None or xmax is None or step is None:
            logger.debug(f"input manifest line {lineno}: unparsable record {line!r}, skipping")
            continue
        if name in seen:
            raise ManifestMalformedError(f"Duplicate parameter name in input manifest: {name}")
        seen.add(name)

        decimals = step_decimals(step)
        spec = SliderSpec(
            name=name,
            minimum=round(xmin, decimals),
            maximum=round(xmax, decimals),
            step=step,
            decimals=decimals,
        )
        if not spec.usable:
            logger.warning(
                f"Slider '{name}' is unusable: range ({spec.minimum}, {spec.maximum}), "
                f"step {step}"
            )
        sliders.append(spec)

    if not sliders:
        raise ManifestMalformedError("Input manifest contains no parameters")
    return sliders


def parse_coordinate_manifest(text: str) -> Dict[str, np.ndarray]:
    """
    Parse ``x_values.txt`` into named coordinate grids.

    Any line that is not a number starts a new group named by the line with
    ``":"`` removed. A repeated group name replaces the earlier group.

    Parameters
    ----------
    text : str
        Manifest contents

    Returns
    -------
    dict
        Group name -> float64 array of coordinates
    """
    groups: Dict[str, np.ndarray] = {}
    key: Optional[str] = None
    values: List[float] = []

    for lineno, line in _records(text):
        value = _parse_float(line)
        if value is not None:
            if key is None:
                logger.debug(f"coordinate manifest line {lineno}: value before any group, skipping")
                continue
            values.append(value)
            continue

        if key is not None:
            groups[key] = np.asarray(values, dtype=np.float64)
        key = line.replace(":", "").strip()
        values = []

    if key is not None:
        groups[key] = np.asarray(values, dtype=np.float64)

    if not groups:
        raise ManifestMalformedError("Coordinate manifest contains no groups")
    return groups


def spectrum_label(name: str) -> Optional[str]:
    """
    Display label for an output name.

    The first underscore-delimited segment is dropped and the rest is
    upper-cased: ``"cl_tt"`` -> ``"TT"``. Returns None when the name has no
    underscore or nothing follows it.
    """
    parts = name.split("_")
    label = "_".join(parts[1:]).upper()
    return label or None


def parse_index_manifest(text: str) -> Dict[str, OutputRange]:
    """
    Parse ``output_indices.txt`` into output ranges.

    Parameters
    ----------
    text : str
        Manifest contents

    Returns
    -------
    dict
        Output name -> OutputRange, in file order
    """
    ranges: Dict[str, OutputRange] = {}
    for lineno, line in _records(text):
        fields = _fields(line)
        name = fields[0]
        if name.startswith(constants.DERIVED_PREFIX):
            continue
        if len(fields) < 3:
            logger.debug(f"index manifest line {lineno}: expected 3 fields, skipping")
            continue

        start, end = _parse_int(fields[1]), _parse_int(fields[2])
        label = spectrum_label(name)
        if start is None or end is None or label is None:
            logger.debug(f"index manifest line {lineno}: unparsable record {line!r}, skipping")
            continue
        if start < 0 or end <= start:
            logger.debug(f"index manifest line {lineno}: empty range [{start}, {end}), skipping")
            continue

        ranges[name] = OutputRange(
            name=name, start=start, end=end, label=label, rule=ScaleRule.for_label(label)
        )

    if not ranges:
        raise ManifestMalformedError("Index manifest contains no output ranges")
    return ranges


def spectrum_labels(ranges: Dict[str, OutputRange]) -> List[str]:
    """Distinct display labels in manifest order."""
    labels: List[str] = []
    for output in ranges.values():
        if output.label not in labels:
            labels.append(output.label)
    return labels


def parse_best_fit_manifest(text: str) -> List[Tuple[str, float]]:
    """
    Parse ``best_fit.txt`` into ``(name, value)`` pairs in file order.
    """
    entries: List[Tuple[str, float]] = []
    for lineno, line in _records(text):
        fields = _fields(line)
        if len(fields) < 2:
            logger.debug(f"best-fit manifest line {lineno}: expected 2 fields, skipping")
            continue
        value = _parse_float(fields[1])
        if value is None:
            logger.debug(f"best-fit manifest line {lineno}: unparsable value {line!r}, skipping")
            continue
        entries.append((fields[0], value))
    return entries


def align_defaults(
    sliders: Sequence[SliderSpec], best_fit: Sequence[Tuple[str, float]]
) -> List[float]:
    """
    Order best-fit values to match the sliders.

    Values are matched by parameter name when every slider has a best-fit
    entry. Otherwise they are taken in file order, which requires the two
    manifests to list the same number of parameters.

    Parameters
    ----------
    sliders : sequence of SliderSpec
        Parsed input manifest
    best_fit : sequence of (str, float)
        Parsed best-fit manifest

    Returns
    -------
    list of float
        One default per slider, rounded to the slider precision

    Raises
    ------
    ManifestMalformedError
        If the manifests cannot be aligned
    """
    by_name = dict(best_fit)
    if all(spec.name in by_name for spec in sliders):
        return [spec.round(by_name[spec.name]) for spec in sliders]

    if len(best_fit) != len(sliders):
        raise ManifestMalformedError(
            f"Best-fit manifest has {len(best_fit)} values for {len(sliders)} parameters"
        )

    logger.warning("Best-fit names do not match parameter names; aligning by position")
    return [spec.round(value) for spec, (_, value) in zip(sliders, best_fit)]
