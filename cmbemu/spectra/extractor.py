"""
Curve extraction from raw emulator output.

The model output is one flat buffer. The index manifest says which slice
belongs to which spectrum and the coordinate manifest gives the multipoles
for that slice. Extraction slices the buffer, applies the spectrum's scale
rule and pairs each value with its multipole.
"""

from typing import Dict, List, Mapping, Tuple

import numpy as np

from cmbemu.core import constants
from cmbemu.core.exceptions import (
    LengthMismatchError,
    MissingCoordinatesError,
    UnknownSpectrumError,
)
from cmbemu.core.logging_config import get_logger
from cmbemu.package import manifests
from cmbemu.package.structures import OutputRange, PlotPoint

logger = get_logger("spectra.extractor")


def find_output(label: str, outputs: Mapping[str, OutputRange]) -> OutputRange:
    """
    Output range whose display label matches ``label`` (case-insensitive).

    Raises
    ------
    UnknownSpectrumError
        If no range carries the label
    """
    for output in outputs.values():
        if output.matches(label):
            return output
    raise UnknownSpectrumError(label, manifests.spectrum_labels(dict(outputs)))


def extract_arrays(
    raw_output: np.ndarray,
    label: str,
    outputs: Mapping[str, OutputRange],
    coordinates: Dict[str, np.ndarray],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Slice and scale one spectrum.

    Parameters
    ----------
    raw_output : array
        Flat model output
    label : str
        Spectrum label, e.g. "TT"
    outputs : mapping
        Output name -> OutputRange
    coordinates : dict
        Coordinate group name -> array; the ``"Cl"`` group is used

    Returns
    -------
    coordinate : array
        Multipoles
    value : array
        Scaled spectrum

    Raises
    ------
    UnknownSpectrumError
        If no output range matches ``label``
    MissingCoordinatesError
        If there is no ``"Cl"`` coordinate group
    LengthMismatchError
        If the range length differs from the coordinate count, or the range
        runs past the end of the buffer
    """
    output = find_output(label, outputs)

    if constants.MULTIPOLE_GROUP not in coordinates:
        raise MissingCoordinatesError(
            f"No '{constants.MULTIPOLE_GROUP}' group in coordinate manifest"
        )
    ell = np.asarray(coordinates[constants.MULTIPOLE_GROUP], dtype=np.float64)

    if output.length != len(ell):
        raise LengthMismatchError(
            f"Output '{output.name}' has {output.length} values but "
            f"{len(ell)} coordinates"
        )

    raw_output = np.asarray(raw_output)
    if output.end > raw_output.size:
        raise LengthMismatchError(
            f"Output '{output.name}' ends at {output.end} but model produced "
            f"{raw_output.size} values"
        )

    raw = raw_output[output.start : output.end].astype(np.float64)
    return ell, raw * output.rule.factors(ell)


def extract(
    raw_output: np.ndarray,
    label: str,
    outputs: Mapping[str, OutputRange],
    coordinates: Dict[str, np.ndarray],
) -> List[PlotPoint]:
    """
    Plottable curve for one spectrum.

    Pure function: the same raw output can be extracted for several labels.
    See ``extract_arrays`` for parameters and errors.

    Returns
    -------
    list of PlotPoint
        One point per multipole
    """
    ell, values = extract_arrays(raw_output, label, outputs, coordinates)
    return [PlotPoint(coordinate=float(x), value=float(y)) for x, y in zip(ell, values)]
