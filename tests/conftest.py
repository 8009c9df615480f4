"""
Pytest configuration and shared fixtures for cmbemu tests.

This module provides:
- A fake TFLite interpreter so tests run without TensorFlow
- Factory fixtures writing model packages to temporary zip files
"""

import zipfile

import numpy as np
import pytest

FAKE_MODEL = b"FAKE-TFLITE-MODEL"

INPUT_NAMES = "ombh2, 0.01, 0.05, 0.001\nomch2, 0.08, 0.16, 0.01\nh, 0.6, 0.8, 0.01\n"
BEST_FIT = "ombh2, 0.02237\nomch2, 0.1200\nh, 0.6736\n"
X_VALUES = "Cl:\n2\n3\n4\n5\n6\n"
OUTPUT_INDICES = (
    "cl_tt, 0, 5\n"
    "cl_te, 5, 10\n"
    "cl_ee, 10, 15\n"
    "cl_pp, 15, 20\n"
    "derived_sigma8, 20, 21\n"
)
OUTPUT_SIZE = 21


class FakeInterpreter:
    """
    Stand-in for ``tf.lite.Interpreter``.

    Output element ``j`` is ``(j + 1) * sum(params)``.
    """

    def __init__(self, input_width: int = 3, output_size: int = OUTPUT_SIZE, fail_invoke=False):
        self.input_width = input_width
        self.output_size = output_size
        self.fail_invoke = fail_invoke
        self.allocated = False
        self.invocations = 0
        self._input = None
        self._output = None

    def allocate_tensors(self):
        self.allocated = True

    def get_input_details(self):
        return [{"index": 0, "shape": np.array([1, self.input_width]), "dtype": np.float32}]

    def get_output_details(self):
        return [{"index": 1, "shape": np.array([1, self.output_size]), "dtype": np.float32}]

    def set_tensor(self, index, value):
        assert index == 0
        assert value.dtype == np.float32
        assert tuple(value.shape) == (1, self.input_width)
        self._input = value.copy()

    def invoke(self):
        if self.fail_invoke:
            raise RuntimeError("invoke failed")
        self.invocations += 1
        total = float(self._input.sum())
        self._output = (np.arange(self.output_size, dtype=np.float32) + 1) * np.float32(total)
        self._output = self._output.reshape(1, self.output_size)

    def get_tensor(self, index):
        assert index == 1
        return self._output.copy()


@pytest.fixture
def interpreter_factory():
    """Factory accepting only the fake model blob, like the real interpreter would."""
    created = []

    def _factory(model_bytes, num_threads=None):
        if not model_bytes.startswith(b"FAKE"):
            raise ValueError("Model provided has model identifier 'XXXX', should be 'TFL3'")
        interpreter = FakeInterpreter()
        created.append(interpreter)
        return interpreter

    _factory.created = created
    return _factory


@pytest.fixture
def package_entries():
    """Default contents of a valid model package."""
    return {
        "model.tflite": FAKE_MODEL,
        "input_names.txt": INPUT_NAMES,
        "best_fit.txt": BEST_FIT,
        "x_values.txt": X_VALUES,
        "output_indices.txt": OUTPUT_INDICES,
        "ombh2.svg": "<svg/>",
        "omch2.svg": "<svg/>",
        "h.svg": "<svg/>",
    }


@pytest.fixture
def make_package(tmp_path, package_entries):
    """
    Factory fixture writing a model package.

    Keyword arguments replace entries; a value of None removes the entry.
    """

    def _create(name: str = "model.cmb", **overrides) -> str:
        entries = dict(package_entries)
        for key, value in overrides.items():
            entry = key.replace("__", ".")
            if value is None:
                entries.pop(entry, None)
            else:
                entries[entry] = value

        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as archive:
            for entry, data in entries.items():
                archive.writestr(entry, data)
        return str(path)

    return _create


@pytest.fixture
def package_path(make_package):
    """Path to a valid model package."""
    return make_package()
