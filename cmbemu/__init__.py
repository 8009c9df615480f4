"""
cmbemu: CMB power-spectrum emulator viewer core

Loads zipped emulator model packages (a TFLite network plus text manifests
describing its input parameters and output layout), runs the network for a
parameter vector and turns the raw output into plottable spectra.
"""

__version__ = "0.1.0"
__author__ = "Andreas Bek Nygaard Hansen"

from cmbemu.core import constants

__all__ = [
    "constants",
]
