"""
Command-line interface for cmbemu.

This module provides CLI tools for:
- Validating and describing model packages
- Evaluating the emulator from the shell
- Printing the multipole axis ticks
"""

__all__ = []
