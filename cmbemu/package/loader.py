"""
Model package loading.

``load_package`` validates a package and parses it into a ``ModelPackage``:
the slider specifications, default parameter values, coordinate grids,
output ranges and the model blob, all read into memory. The archive is
closed before the package is returned, on success and on failure.
"""

import zipfile
import zlib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from cmbemu.core import constants
from cmbemu.core.exceptions import (
    CorruptArchiveError,
    ManifestMalformedError,
    ManifestMissingError,
)
from cmbemu.core.logging_config import get_logger
from cmbemu.package import manifests
from cmbemu.package.structures import OutputRange, SliderSpec
from cmbemu.package.validator import PackageSource, check_entries, open_archive

logger = get_logger("package.loader")


@dataclass
class ModelPackage:
    """
    Parsed contents of a model package.

    Attributes
    ----------
    sliders : list of SliderSpec
        One spec per model input, in input order
    defaults : list of float
        Best-fit parameter values, index-aligned with ``sliders``
    coordinates : dict
        Coordinate group name -> float64 array
    outputs : dict
        Output name -> OutputRange
    model_bytes : bytes
        Serialized TFLite model
    assets : dict
        Slider asset name -> file contents, for assets present in the archive
    source : str, optional
        Where the package was read from, for messages
    """

    sliders: List[SliderSpec]
    defaults: List[float]
    coordinates: Dict[str, np.ndarray]
    outputs: Dict[str, OutputRange]
    model_bytes: bytes
    assets: Dict[str, bytes] = field(default_factory=dict)
    source: Optional[str] = None

    @property
    def spectrum_labels(self) -> List[str]:
        """Selectable spectrum labels, in manifest order."""
        return manifests.spectrum_labels(self.outputs)

    @property
    def parameter_names(self) -> List[str]:
        return [spec.name for spec in self.sliders]

    @property
    def input_width(self) -> int:
        return len(self.sliders)

    @property
    def output_size(self) -> int:
        """Smallest output buffer length covering every output range."""
        return max(output.end for output in self.outputs.values())

    def resolve_spectrum(self, previous: Optional[str]) -> str:
        """
        Keep ``previous`` if this package offers it, else pick the first label.
        """
        labels = self.spectrum_labels
        if previous is not None:
            for label in labels:
                if label.casefold() == previous.casefold():
                    return label
        return labels[0]

    def asset(self, spec: SliderSpec) -> Optional[bytes]:
        return self.assets.get(spec.asset_name)


def _read_entry(archive: zipfile.ZipFile, entry: str) -> bytes:
    try:
        return archive.read(entry)
    except KeyError:
        raise ManifestMissingError(entry) from None
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise CorruptArchiveError(f"Entry {entry} is damaged: {e}") from e


def _read_text(archive: zipfile.ZipFile, entry: str) -> str:
    data = _read_entry(archive, entry)
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ManifestMalformedError(f"{entry} is not valid UTF-8: {e}") from e


def find_model_entry(archive: zipfile.ZipFile) -> str:
    """
    Name of the model blob: ``model.tflite``, else the first ``*.tflite`` entry.
    """
    names = archive.namelist()
    if constants.MODEL_ENTRY in names:
        return constants.MODEL_ENTRY
    for name in names:
        if name.endswith(".tflite"):
            return name
    raise ManifestMissingError(constants.MODEL_ENTRY)


def parse(archive: zipfile.ZipFile, source: Optional[str] = None) -> ModelPackage:
    """
    Parse the manifests and model blob of an open archive.

    Parameters
    ----------
    archive : zipfile.ZipFile
        Open package archive
    source : str, optional
        Package location, kept for messages

    Returns
    -------
    ModelPackage
        Parsed package

    Raises
    ------
    ParseError
        If a manifest is missing or unusable. No package is returned.
    CorruptArchiveError
        If an entry payload fails its CRC or cannot be decompressed
    """
    sliders = manifests.parse_input_manifest(_read_text(archive, constants.INPUT_MANIFEST))
    coordinates = manifests.parse_coordinate_manifest(
        _read_text(archive, constants.COORDINATE_MANIFEST)
    )
    outputs = manifests.parse_index_manifest(_read_text(archive, constants.INDEX_MANIFEST))
    best_fit = manifests.parse_best_fit_manifest(_read_text(archive, constants.BEST_FIT_MANIFEST))
    defaults = manifests.align_defaults(sliders, best_fit)

    model_bytes = _read_entry(archive, find_model_entry(archive))

    names = set(archive.namelist())
    assets: Dict[str, bytes] = {}
    for spec in sliders:
        if spec.asset_name in names:
            assets[spec.asset_name] = _read_entry(archive, spec.asset_name)
        else:
            logger.warning(f"Asset {spec.asset_name} not found in package")

    package = ModelPackage(
        sliders=sliders,
        defaults=defaults,
        coordinates=coordinates,
        outputs=outputs,
        model_bytes=model_bytes,
        assets=assets,
        source=source,
    )
    logger.info(
        f"Parsed model package {source or '<memory>'}: {len(sliders)} parameters, "
        f"spectra {', '.join(package.spectrum_labels)}"
    )
    return package


def load_package(source: PackageSource) -> ModelPackage:
    """
    Validate and parse a model package.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        Package location or contents

    Returns
    -------
    ModelPackage
        Parsed package

    Raises
    ------
    ValidationError
        If the source is not a compliant package or an entry is damaged
    ParseError
        If its manifests cannot be parsed
    """
    if isinstance(source, (str, Path)):
        name = str(source)
    else:
        name = getattr(source, "name", None)
    with open_archive(source) as archive:
        check_entries(archive)
        return parse(archive, source=name)
