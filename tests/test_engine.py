"""
Tests for the inference engine adapter.
"""

import threading

import numpy as np
import pytest

from cmbemu.core.exceptions import (
    AllocationFailedError,
    BadModelFormatError,
    EngineError,
    ShapeMismatchError,
)
from cmbemu.inference import engine as engine_module
from cmbemu.inference.engine import Engine

from conftest import FAKE_MODEL, OUTPUT_SIZE, FakeInterpreter


def test_load_and_run(interpreter_factory):
    engine = Engine.load(FAKE_MODEL, interpreter_factory=interpreter_factory)

    assert interpreter_factory.created[0].allocated
    assert engine.input_width == 3
    assert engine.output_size == OUTPUT_SIZE

    output = engine.run([0.5, 1.0, 1.5])

    assert output.dtype == np.float32
    assert output.shape == (OUTPUT_SIZE,)
    np.testing.assert_allclose(output, (np.arange(OUTPUT_SIZE) + 1) * 3.0)


def test_bad_model_format(interpreter_factory):
    with pytest.raises(BadModelFormatError):
        Engine.load(b"not a model", interpreter_factory=interpreter_factory)


def test_allocation_failure():
    class NoMemory(FakeInterpreter):
        def allocate_tensors(self):
            raise RuntimeError("Failed to allocate tensors")

    with pytest.raises(AllocationFailedError):
        Engine.load(FAKE_MODEL, interpreter_factory=lambda data, threads: NoMemory())


def test_model_without_outputs():
    class NoOutputs(FakeInterpreter):
        def get_output_details(self):
            return []

    with pytest.raises(BadModelFormatError):
        Engine.load(FAKE_MODEL, interpreter_factory=lambda data, threads: NoOutputs())


def test_shape_mismatch(interpreter_factory):
    engine = Engine.load(FAKE_MODEL, interpreter_factory=interpreter_factory)

    with pytest.raises(ShapeMismatchError):
        engine.run([1.0, 2.0])
    assert interpreter_factory.created[0].invocations == 0


def test_backend_failure():
    engine = Engine(FakeInterpreter(fail_invoke=True))

    with pytest.raises(EngineError):
        engine.run([1.0, 2.0, 3.0])


def test_num_threads_forwarded():
    seen = {}

    def factory(data, threads):
        seen["threads"] = threads
        return FakeInterpreter()

    Engine.load(FAKE_MODEL, interpreter_factory=factory, num_threads=2)

    assert seen["threads"] == 2


def test_missing_tensorflow(monkeypatch):
    monkeypatch.setattr(engine_module, "HAS_TFLITE", False)

    with pytest.raises(ImportError, match="TensorFlow"):
        Engine.load(FAKE_MODEL)


def test_concurrent_runs_are_serialized():
    class Recording(FakeInterpreter):
        def __init__(self):
            super().__init__()
            self.active = 0
            self.overlap = False

        def invoke(self):
            self.active += 1
            if self.active > 1:
                self.overlap = True
            super().invoke()
            self.active -= 1

    interpreter = Recording()
    engine = Engine(interpreter)
    threads = [
        threading.Thread(target=engine.run, args=([float(i), 0.0, 0.0],)) for i in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert interpreter.invocations == 8
    assert not interpreter.overlap


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
