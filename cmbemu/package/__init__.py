"""
Model package format: validation, manifest parsing and loading.
"""

from cmbemu.package.structures import OutputRange, PlotPoint, ScaleRule, SliderSpec
from cmbemu.package.validator import validate, is_valid_package, open_archive
from cmbemu.package.loader import ModelPackage, load_package, parse

__all__ = [
    "OutputRange",
    "PlotPoint",
    "ScaleRule",
    "SliderSpec",
    "validate",
    "is_valid_package",
    "open_archive",
    "ModelPackage",
    "load_package",
    "parse",
]
