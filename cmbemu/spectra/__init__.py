"""
Spectrum extraction and plot axis mapping.
"""

from cmbemu.spectra.extractor import extract, extract_arrays, find_output
from cmbemu.spectra.axis import AxisMapper, to_display, ticks, y_axis_limits

__all__ = [
    "extract",
    "extract_arrays",
    "find_output",
    "AxisMapper",
    "to_display",
    "ticks",
    "y_axis_limits",
]
