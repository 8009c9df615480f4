"""
Adapter around the TFLite interpreter.

The emulator network has one input tensor holding the parameter vector and
one output tensor holding every spectrum back to back. ``Engine`` hides the
interpreter API behind ``load`` and ``run``.
"""

import threading
from typing import Any, Callable, Optional, Sequence

import numpy as np

try:
    import tensorflow as tf

    HAS_TFLITE = True
except ImportError:
    HAS_TFLITE = False
    tf = None

from cmbemu.core.exceptions import (
    AllocationFailedError,
    BadModelFormatError,
    EngineError,
    ShapeMismatchError,
)
from cmbemu.core.logging_config import get_logger

logger = get_logger("inference.engine")

InterpreterFactory = Callable[[bytes, Optional[int]], Any]


def tflite_interpreter(model_bytes: bytes, num_threads: Optional[int] = None):
    """
    Create a TFLite interpreter for an in-memory model.

    Raises
    ------
    ImportError
        If TensorFlow is not installed
    """
    if not HAS_TFLITE:
        raise ImportError(
            "TensorFlow is required to run emulator models. "
            "Install with: pip install cmb-emulator[tflite]"
        )
    return tf.lite.Interpreter(model_content=model_bytes, num_threads=num_threads)


class Engine:
    """
    Loaded emulator model.

    Calls to ``run`` are serialized by an internal lock, so one instance may
    be shared between threads.
    """

    def __init__(self, interpreter: Any):
        """
        Wrap an interpreter whose tensors are already allocated.

        Parameters
        ----------
        interpreter : object
            Object implementing the ``tf.lite.Interpreter`` interface
        """
        inputs = interpreter.get_input_details()
        outputs = interpreter.get_output_details()
        if not inputs or not outputs:
            raise BadModelFormatError("Model must have one input and one output tensor")
        if len(inputs) > 1 or len(outputs) > 1:
            logger.warning(
                f"Model has {len(inputs)} inputs and {len(outputs)} outputs; using the first of each"
            )

        self._interpreter = interpreter
        self._input = inputs[0]
        self._output = outputs[0]
        self._lock = threading.Lock()

    @classmethod
    def load(
        cls,
        model_bytes: bytes,
        interpreter_factory: Optional[InterpreterFactory] = None,
        num_threads: Optional[int] = None,
    ) -> "Engine":
        """
        Load a model and allocate its tensors.

        Parameters
        ----------
        model_bytes : bytes
            Serialized TFLite model
        interpreter_factory : callable, optional
            ``factory(model_bytes, num_threads)`` returning an interpreter.
            Defaults to ``tflite_interpreter``.
        num_threads : int, optional
            Threads used by the interpreter

        Returns
        -------
        Engine
            Ready-to-run engine

        Raises
        ------
        BadModelFormatError
            If the backend rejects the model
        AllocationFailedError
            If tensor buffers cannot be allocated
        """
        factory = interpreter_factory or tflite_interpreter
        try:
            interpreter = factory(model_bytes, num_threads)
        except ValueError as e:
            raise BadModelFormatError(f"Backend rejected model: {e}") from e

        try:
            interpreter.allocate_tensors()
        except (RuntimeError, MemoryError) as e:
            raise AllocationFailedError(f"Cannot allocate tensors: {e}") from e

        engine = cls(interpreter)
        logger.info(
            f"Model loaded: {engine.input_width} inputs, {engine.output_size} outputs"
        )
        return engine

    @property
    def input_width(self) -> int:
        return int(np.prod(self._input["shape"]))

    @property
    def output_size(self) -> int:
        return int(np.prod(self._output["shape"]))

    def run(self, params: Sequence[float]) -> np.ndarray:
        """
        Evaluate the model for one parameter vector.

        Parameters
        ----------
        params : sequence of float
            Parameter values in slider order

        Returns
        -------
        array
            Flat float32 output of length ``output_size``

        Raises
        ------
        ShapeMismatchError
            If ``len(params)`` differs from the model input width
        EngineError
            If the backend fails
        """
        values = np.asarray(params, dtype=np.float32).ravel()
        if values.size != self.input_width:
            raise ShapeMismatchError(
                f"Model expects {self.input_width} parameters, got {values.size}"
            )

        with self._lock:
            try:
                self._interpreter.set_tensor(
                    self._input["index"], values.reshape(self._input["shape"])
                )
                self._interpreter.invoke()
                output = self._interpreter.get_tensor(self._output["index"])
            except (RuntimeError, ValueError) as e:
                raise EngineError(f"Inference failed: {e}") from e

        result = np.array(output, dtype=np.float32).ravel()
        logger.debug(f"Ran model on {values.size} parameters -> {result.size} outputs")
        return result
