"""
Tests for CLI module.
"""

import json
import sys

import numpy as np
import pytest

from cmbemu.cli.main import info_cmd, main, predict_cmd, ticks_cmd, validate_cmd
from cmbemu.core.exceptions import UnknownSpectrumError
from cmbemu.inference import engine as engine_module


@pytest.fixture
def fake_backend(monkeypatch, interpreter_factory):
    monkeypatch.setattr(engine_module, "tflite_interpreter", interpreter_factory)
    return interpreter_factory


def _args(**kwargs):
    defaults = {"spectrum": None, "param": None, "config": None, "display": False, "output": None}
    defaults.update(kwargs)
    return type("Args", (), defaults)()


def test_validate_cmd_ok(package_path, capsys):
    validate_cmd(_args(package=package_path))

    assert "OK" in capsys.readouterr().out


def test_validate_cmd_invalid(make_package, capsys):
    with pytest.raises(SystemExit) as excinfo:
        validate_cmd(_args(package=make_package(input_names__txt=None)))

    assert excinfo.value.code == 1
    assert "input_names.txt" in capsys.readouterr().out


def test_info_cmd(package_path, capsys):
    info_cmd(_args(package=package_path))

    out = capsys.readouterr().out
    assert "ombh2" in out
    assert "[0.010, 0.050]" in out
    assert "TT, TE, EE, PP" in out


def test_predict_cmd_stdout(package_path, fake_backend, capsys):
    predict_cmd(_args(package=package_path, spectrum="ee", param=["h=0.7"]))

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "# l, EE"
    assert len(lines) == 6
    assert lines[1].startswith("2,")


def test_predict_cmd_output_file(package_path, fake_backend, tmp_path):
    output = tmp_path / "tt.csv"

    predict_cmd(_args(package=package_path, output=str(output), display=True))

    data = np.loadtxt(output, delimiter=",", skiprows=1)
    assert data.shape == (5, 3)
    assert data[0, 2] == pytest.approx(0.0)


def test_predict_cmd_unknown_spectrum(package_path, fake_backend):
    with pytest.raises(UnknownSpectrumError):
        predict_cmd(_args(package=package_path, spectrum="BB"))


def test_predict_cmd_bad_param(package_path, fake_backend):
    with pytest.raises(ValueError, match="name=value"):
        predict_cmd(_args(package=package_path, param=["h"]))


def test_ticks_cmd(capsys):
    ticks_cmd(_args())

    result = json.loads(capsys.readouterr().out)
    assert [t["label"] for t in result["major"]][:2] == ["10^1", "10^2"]
    assert result["major"][-1]["l"] == 2500
    assert result["major"][-1]["position"] == pytest.approx(1.0)


def test_main_no_command(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["cmbemu"])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1


def test_main_error_exits(monkeypatch, tmp_path):
    path = tmp_path / "junk.bin"
    path.write_bytes(b"junk")
    monkeypatch.setattr(sys, "argv", ["cmbemu", "info", str(path)])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
