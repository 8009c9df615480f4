"""
Tests for model package loading.
"""

import zipfile
from pathlib import Path

import numpy as np
import pytest

from cmbemu.core.exceptions import (
    CorruptArchiveError,
    EmulatorError,
    ManifestMalformedError,
    ManifestMissingError,
    MissingEntryError,
    NotAnArchiveError,
    ParseError,
)
from cmbemu.package.loader import load_package

from conftest import FAKE_MODEL


def test_load_package(package_path):
    """All tables are built from the manifests."""
    package = load_package(package_path)

    assert package.parameter_names == ["ombh2", "omch2", "h"]
    assert package.input_width == 3
    assert package.defaults == [0.022, 0.12, 0.67]
    np.testing.assert_array_equal(package.coordinates["Cl"], [2, 3, 4, 5, 6])
    assert list(package.outputs) == ["cl_tt", "cl_te", "cl_ee", "cl_pp"]
    assert package.spectrum_labels == ["TT", "TE", "EE", "PP"]
    assert package.output_size == 20
    assert package.model_bytes == FAKE_MODEL
    assert package.source == package_path


def test_load_package_from_bytes(package_path):
    package = load_package(Path(package_path).read_bytes())

    assert package.source is None
    assert package.spectrum_labels == ["TT", "TE", "EE", "PP"]


def test_assets_resolved(package_path):
    package = load_package(package_path)

    assert [s.asset_name for s in package.sliders] == ["ombh2.svg", "omch2.svg", "h.svg"]
    assert package.asset(package.sliders[0]) == b"<svg/>"


def test_missing_asset_is_not_fatal(make_package):
    package = load_package(make_package(h__svg=None))

    assert package.asset(package.sliders[2]) is None
    assert len(package.assets) == 2


def test_validation_runs_first(make_package, tmp_path):
    with pytest.raises(MissingEntryError):
        load_package(make_package(output_indices__txt=None))

    path = tmp_path / "plain.txt"
    path.write_text("hello")
    with pytest.raises(NotAnArchiveError):
        load_package(path)


def test_missing_best_fit(make_package):
    with pytest.raises(ManifestMissingError) as excinfo:
        load_package(make_package(best_fit__txt=None))

    assert excinfo.value.entry == "best_fit.txt"


def test_malformed_manifest_aborts_parse(make_package):
    """No package is produced when one manifest is unusable."""
    with pytest.raises(ParseError):
        load_package(make_package(output_indices__txt="derived_sigma8, 0, 1\n"))


def test_best_fit_count_mismatch(make_package):
    with pytest.raises(ManifestMalformedError):
        load_package(make_package(best_fit__txt="a, 0.1\n"))


def test_non_utf8_manifest(make_package):
    with pytest.raises(ManifestMalformedError, match="UTF-8"):
        load_package(make_package(x_values__txt=b"Cl:\n\xff\xfe\n"))


def test_resolve_spectrum(package_path):
    package = load_package(package_path)

    assert package.resolve_spectrum("EE") == "EE"
    assert package.resolve_spectrum("pp") == "PP"
    assert package.resolve_spectrum("BB") == "TT"
    assert package.resolve_spectrum(None) == "TT"


def _damage_entry(path, entry):
    """Flip the first payload byte of a stored entry in place."""
    with zipfile.ZipFile(path) as archive:
        offset = archive.getinfo(entry).header_offset
    data = bytearray(Path(path).read_bytes())
    name_length = int.from_bytes(data[offset + 26 : offset + 28], "little")
    extra_length = int.from_bytes(data[offset + 28 : offset + 30], "little")
    start = offset + 30 + name_length + extra_length
    data[start] ^= 0xFF
    Path(path).write_bytes(bytes(data))


def test_damaged_manifest_entry(package_path):
    """A payload failing its CRC is reported as a corrupt package."""
    _damage_entry(package_path, "input_names.txt")

    with pytest.raises(CorruptArchiveError, match="input_names.txt") as excinfo:
        load_package(package_path)

    assert isinstance(excinfo.value, EmulatorError)
    assert isinstance(excinfo.value.__cause__, zipfile.BadZipFile)


def test_damaged_asset_entry(package_path):
    _damage_entry(package_path, "ombh2.svg")

    with pytest.raises(CorruptArchiveError, match="ombh2.svg"):
        load_package(package_path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
