"""
Multipole axis mapping for spectrum plots.

Low multipoles are shown on a logarithmic scale and high multipoles on a
linear one. ``AxisMapper`` maps a multipole ``l`` in ``[min_coordinate,
max_coordinate]`` to a display coordinate in ``[0, 1]``:

- ``l <= log_scale_bound``: logarithmic, ``min_coordinate`` -> 0 and
  ``log_scale_bound`` -> ``transition_fraction``
- ``l > log_scale_bound``: linear, ``log_scale_bound`` ->
  ``transition_fraction`` and ``max_coordinate`` -> 1

Both branches agree at ``log_scale_bound``, so the mapping is continuous and
monotonic.
"""

from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

from cmbemu.core import constants
from cmbemu.core.logging_config import get_logger

logger = get_logger("spectra.axis")

ArrayLike = Union[float, np.ndarray]


@dataclass(frozen=True)
class AxisMapper:
    """
    Hybrid log/linear multipole axis.

    Attributes
    ----------
    log_scale_bound : float
        Multipole where the axis switches from log to linear
    transition_fraction : float
        Display coordinate of ``log_scale_bound``
    min_coordinate : float
        Multipole mapped to 0
    max_coordinate : float
        Multipole mapped to 1
    """

    log_scale_bound: float = constants.LOG_SCALE_BOUND
    transition_fraction: float = constants.TRANSITION_FRACTION
    min_coordinate: float = constants.MIN_COORDINATE
    max_coordinate: float = constants.MAX_COORDINATE

    @classmethod
    def from_config(cls, config) -> "AxisMapper":
        return cls(
            log_scale_bound=config.log_scale_bound,
            transition_fraction=config.transition_fraction,
            min_coordinate=config.min_coordinate,
            max_coordinate=config.max_coordinate,
        )

    def log_scale(self, x: ArrayLike) -> ArrayLike:
        """Logarithmic branch, valid for ``x <= log_scale_bound``."""
        log_min = np.log10(self.min_coordinate)
        log_bound = np.log10(self.log_scale_bound)
        return (np.log10(x) - log_min) / (log_bound - log_min) * self.transition_fraction

    def linear_scale(self, x: ArrayLike) -> ArrayLike:
        """Linear branch, valid for ``x >= log_scale_bound``."""
        span = self.max_coordinate - self.log_scale_bound
        fraction = (np.asarray(x, dtype=np.float64) - self.log_scale_bound) / span
        return fraction * (1.0 - self.transition_fraction) + self.transition_fraction

    def to_display(self, x: ArrayLike) -> ArrayLike:
        """
        Map multipoles to display coordinates.

        Parameters
        ----------
        x : float or array
            Multipole(s), positive

        Returns
        -------
        float or array
            Display coordinate(s); a float for scalar input
        """
        values = np.asarray(x, dtype=np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            result = np.where(
                values <= self.log_scale_bound,
                self.log_scale(values),
                self.linear_scale(values),
            )
        if result.ndim == 0:
            return float(result)
        return result

    def tick_values(self) -> Tuple[List[int], List[int]]:
        """
        Multipoles carrying major and minor ticks.

        Below ``log_scale_bound`` powers of ten are major ticks and multiples
        of the current decade minor ticks (2..9, 20..90, ...). From
        ``log_scale_bound`` on, multiples of 500 are major and multiples of
        100 minor.

        Returns
        -------
        major, minor : list of int
            Raw multipoles
        """
        major: List[int] = []
        minor: List[int] = []
        decade = 1
        bound = int(self.log_scale_bound)
        for i in range(int(self.min_coordinate), int(self.max_coordinate) + 1):
            if i < bound:
                if np.log10(i) % 1 == 0:
                    major.append(i)
                    decade *= 10
                elif i % decade == 0:
                    minor.append(i)
            elif i % constants.LINEAR_MAJOR_STEP == 0:
                major.append(i)
            elif i % constants.LINEAR_MINOR_STEP == 0:
                minor.append(i)
        return major, minor

    def ticks(self) -> Tuple[List[float], List[float]]:
        """
        Major and minor tick positions in display coordinates.

        Returns
        -------
        major, minor : list of float
        """
        major, minor = self.tick_values()
        return (
            [float(self.to_display(i)) for i in major],
            [float(self.to_display(i)) for i in minor],
        )

    def major_tick_labels(self) -> List[str]:
        """Labels for the major ticks: ``10^n`` on the log part, integers after."""
        labels = []
        for i in self.tick_values()[0]:
            if i < self.log_scale_bound:
                labels.append(f"10^{int(round(np.log10(i)))}")
            else:
                labels.append(str(i))
        return labels


def y_axis_limits(label: str) -> Tuple[float, float, float]:
    """
    Display domain of the value axis for a spectrum.

    Returns
    -------
    (minimum, maximum, stride)
        Axis range and tick stride; ``(0, 1, 1)`` for unknown labels
    """
    return constants.Y_AXIS_LIMITS.get(label.upper(), constants.DEFAULT_Y_AXIS_LIMITS)


_default_mapper = AxisMapper()


def to_display(x: ArrayLike) -> ArrayLike:
    """Map multipoles with the default axis constants."""
    return _default_mapper.to_display(x)


def ticks() -> Tuple[List[float], List[float]]:
    """Tick positions with the default axis constants."""
    return _default_mapper.ticks()
