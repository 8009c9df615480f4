"""
Inference backend adapter.
"""

from cmbemu.inference.engine import Engine, tflite_interpreter, HAS_TFLITE

__all__ = [
    "Engine",
    "tflite_interpreter",
    "HAS_TFLITE",
]
