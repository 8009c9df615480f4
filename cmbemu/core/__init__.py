"""
Core utilities.

This module provides:
- Physical and display constants
- Configuration and logging
- Exception hierarchy
"""

from cmbemu.core import constants
from cmbemu.core import config
from cmbemu.core import logging_config
from cmbemu.core import exceptions

__all__ = [
    "constants",
    "config",
    "logging_config",
    "exceptions",
]
