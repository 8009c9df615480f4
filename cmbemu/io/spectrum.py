"""
I/O utilities for spectra.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from cmbemu.core import constants
from cmbemu.core.logging_config import get_logger
from cmbemu.package.structures import PlotPoint

logger = get_logger("io.spectrum")


def reference_file_name(label: str) -> str:
    """Conventional file name of the reference data for a spectrum, e.g. ``tt_data.txt``."""
    return f"{label.lower()}_data.txt"


def load_reference_data(file_path: Union[str, Path], label: str) -> List[PlotPoint]:
    """
    Load measured band powers with error bars.

    The file is whitespace-separated with one header line. For temperature
    and polarization spectra the columns are ``l, D_l, err_low, err_high``.
    Lensing files carry the binned values in columns 3 to 5 as
    ``l, value, err`` with a symmetric error; those values are scaled by 1e7
    to match the emulator curve.

    Parameters
    ----------
    file_path : str or Path
        Path to the data file
    label : str
        Spectrum label the file belongs to

    Returns
    -------
    list of PlotPoint
        Data points with ``err_low``/``err_high`` set
    """
    file_path = Path(file_path)
    df = pd.read_csv(file_path, sep=r"\s+", skiprows=1, header=None, comment="#")
    df = df.apply(pd.to_numeric, errors="coerce")

    if label.upper() == constants.LENSING_LABEL:
        columns = [3, 4, 5, 5]
        scale = constants.LENSING_SCALE
    else:
        columns = [0, 1, 2, 3]
        scale = 1.0

    if df.shape[1] <= max(columns):
        raise ValueError(
            f"Reference data for {label} needs at least {max(columns) + 1} columns, "
            f"found {df.shape[1]} in {file_path}"
        )

    data = df[columns].dropna()
    points = [
        PlotPoint(
            coordinate=float(x),
            value=float(y) * scale,
            err_low=float(low) * scale,
            err_high=float(high) * scale,
        )
        for x, y, low, high in data.itertuples(index=False, name=None)
    ]

    logger.info(f"Loaded reference data from {file_path}: {len(points)} points")
    return points


def save_curve(
    file_path: Union[str, Path],
    points: Sequence[PlotPoint],
    header: Optional[str] = None,
    display_coordinates: Optional[np.ndarray] = None,
) -> None:
    """
    Save a curve to file.

    Parameters
    ----------
    file_path : str or Path
        Output file path; ``.csv`` writes comma-separated values, anything
        else whitespace-separated
    points : sequence of PlotPoint
        Curve to write
    header : str, optional
        Header line
    display_coordinates : array, optional
        Extra column with the plot-space coordinate of each point
    """
    file_path = Path(file_path)

    columns = [
        np.array([p.coordinate for p in points], dtype=np.float64),
        np.array([p.value for p in points], dtype=np.float64),
    ]
    names = ["l", "value"]
    if display_coordinates is not None:
        columns.append(np.asarray(display_coordinates, dtype=np.float64))
        names.append("display")

    if file_path.suffix.lower() == ".csv":
        if header is None:
            header = ",".join(names)

        np.savetxt(
            file_path,
            np.column_stack(columns),
            delimiter=",",
            header=header,
            comments="",
        )
    else:
        np.savetxt(file_path, np.column_stack(columns), header=header or " ".join(names))

    logger.info(f"Saved curve to {file_path}")
