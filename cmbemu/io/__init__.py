"""
Input/output utilities.

This module provides:
- Curve export (CSV or whitespace text)
- Reference band-power loading
"""

from cmbemu.io.spectrum import load_reference_data, reference_file_name, save_curve

__all__ = [
    "load_reference_data",
    "reference_file_name",
    "save_curve",
]
