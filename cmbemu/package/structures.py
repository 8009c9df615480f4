"""
Data structures describing a model package and its outputs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from cmbemu.core import constants


@dataclass(frozen=True)
class SliderSpec:
    """
    Tunable range of one model input parameter.

    Attributes
    ----------
    name : str
        Parameter name, unique within a package. Its position in the
        package's slider list is its position in the model input vector.
    minimum : float
        Lower bound, rounded to ``decimals``
    maximum : float
        Upper bound, rounded to ``decimals``
    step : float
        Slider increment
    decimals : int
        Number of decimal digits the slider displays, derived from ``step``
    """

    name: str
    minimum: float
    maximum: float
    step: float
    decimals: int

    @property
    def range(self) -> Tuple[float, float]:
        return (self.minimum, self.maximum)

    @property
    def precision(self) -> str:
        """printf-style format string, e.g. ``"%.3f"``."""
        return f"%.{self.decimals}f"

    @property
    def usable(self) -> bool:
        """False when the range is empty or the step is not positive."""
        return self.minimum < self.maximum and self.step > 0

    @property
    def asset_name(self) -> str:
        """Archive entry holding the slider's label image."""
        return self.name + constants.ASSET_SUFFIX

    def round(self, value: float) -> float:
        """Round ``value`` to the slider's displayed precision."""
        return round(float(value), self.decimals)

    def clamp(self, value: float) -> float:
        """Round ``value`` and restrict it to the slider range."""
        return min(max(self.round(value), self.minimum), self.maximum)

    def format(self, value: float) -> str:
        return self.precision % value


class ScaleRule(Enum):
    """
    Conversion of raw emulator output to plotted units.

    TEMPERATURE multiplies by T_cmb^2 in muK^2. LENSING multiplies the
    lensing potential by l(l+1) * 1e7.
    """

    TEMPERATURE = "temperature"
    LENSING = "lensing"

    @classmethod
    def for_label(cls, label: str) -> "ScaleRule":
        if label.upper() == constants.LENSING_LABEL:
            return cls.LENSING
        return cls.TEMPERATURE

    def factors(self, coordinates: np.ndarray) -> np.ndarray:
        """
        Per-point scale factors for the given multipoles.

        Parameters
        ----------
        coordinates : array
            Multipole values

        Returns
        -------
        array
            Scale factor for each coordinate
        """
        coordinates = np.asarray(coordinates, dtype=np.float64)
        if self is ScaleRule.LENSING:
            return coordinates * (coordinates + 1.0) * constants.LENSING_SCALE
        return np.full(coordinates.shape, constants.TEMPERATURE_SCALE)


@dataclass(frozen=True)
class OutputRange:
    """
    Slice of the flat model output belonging to one spectrum.

    Attributes
    ----------
    name : str
        Full output name from the index manifest (e.g. "cl_tt")
    start : int
        First index into the output buffer
    end : int
        One past the last index
    label : str
        Display label (e.g. "TT")
    rule : ScaleRule
        How raw values are converted for display
    """

    name: str
    start: int
    end: int
    label: str
    rule: ScaleRule

    @property
    def length(self) -> int:
        return self.end - self.start

    def matches(self, label: str) -> bool:
        return self.label.casefold() == label.casefold()


@dataclass
class PlotPoint:
    """One point of a plotted curve, with optional asymmetric error bar."""

    coordinate: float
    value: float
    err_low: float = 0.0
    err_high: float = 0.0
