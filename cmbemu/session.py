"""
Emulator session: the state a viewer holds for the selected model.

An ``EmulatorSession`` owns exactly one ``(ModelPackage, Engine)`` pair, the
current parameter vector, the selected spectrum and the last good curve.
Opening another package replaces the pair as a whole.

Failure handling
----------------
- Validation and parse errors propagate to the caller and leave the session
  untouched.
- Model load errors, a missing inference backend and parameter/shape errors
  clear the curve and set a neutral status message.
- Inference and extraction errors are logged and the previous curve is kept.
"""

import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from cmbemu.core.config import EmulatorConfig
from cmbemu.core.exceptions import (
    EngineError,
    ExtractError,
    LoadError,
    ShapeMismatchError,
    UnknownSpectrumError,
)
from cmbemu.core.logging_config import get_logger
from cmbemu.inference.engine import Engine, InterpreterFactory
from cmbemu.io.spectrum import load_reference_data, reference_file_name
from cmbemu.package.loader import ModelPackage, load_package
from cmbemu.package.structures import PlotPoint, SliderSpec
from cmbemu.package.validator import PackageSource
from cmbemu.spectra import axis
from cmbemu.spectra.extractor import extract

logger = get_logger("session")

NO_MODEL_MESSAGE = "No model loaded."


class EmulatorSession:
    """
    Viewer-side state for one selected model package.

    Parameters
    ----------
    config : EmulatorConfig, optional
        Session settings; defaults are used when omitted
    interpreter_factory : callable, optional
        Passed to ``Engine.load``
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        interpreter_factory: Optional[InterpreterFactory] = None,
    ):
        self.config = config or EmulatorConfig()
        self.axis = axis.AxisMapper.from_config(self.config)
        self._interpreter_factory = interpreter_factory
        self._lock = threading.RLock()

        self.package: Optional[ModelPackage] = None
        self.engine: Optional[Engine] = None
        self.parameters: List[float] = []
        self.selected: str = self.config.spectrum
        self.curve: List[PlotPoint] = []
        self.status: str = NO_MODEL_MESSAGE

    # ------------------------------------------------------------------
    # Model selection
    # ------------------------------------------------------------------

    def open(self, source: PackageSource) -> ModelPackage:
        """
        Load a model package and make it the session's model.

        Parameters
        ----------
        source : str, Path, bytes or binary file object
            Package to open

        Returns
        -------
        ModelPackage
            The parsed package

        Raises
        ------
        ValidationError, ParseError
            If the package is rejected; the session keeps its previous model
        """
        package = load_package(source)

        with self._lock:
            self.close()
            self.package = package
            self.parameters = list(package.defaults)
            self.selected = package.resolve_spectrum(self.selected)

            try:
                self.engine = Engine.load(
                    package.model_bytes,
                    interpreter_factory=self._interpreter_factory,
                    num_threads=self.config.num_threads,
                )
            except LoadError as e:
                logger.error(f"Failed to load model from {package.source}: {e}")
                self.status = e.user_message
                return package
            except ImportError as e:
                logger.error(f"No inference backend for {package.source}: {e}")
                self.status = LoadError.user_message
                return package

            self.status = ""
            self.update_curve()
        return package

    def close(self) -> None:
        """Discard the current package and engine."""
        with self._lock:
            self.package = None
            self.engine = None
            self.parameters = []
            self.curve = []
            self.status = NO_MODEL_MESSAGE

    # ------------------------------------------------------------------
    # Parameters and spectrum selection
    # ------------------------------------------------------------------

    @property
    def sliders(self) -> List[SliderSpec]:
        return self.package.sliders if self.package is not None else []

    @property
    def spectrum_labels(self) -> List[str]:
        return self.package.spectrum_labels if self.package is not None else []

    def _slider_index(self, key: Union[int, str]) -> int:
        if isinstance(key, int):
            if not 0 <= key < len(self.sliders):
                raise IndexError(f"Parameter index {key} out of range [0, {len(self.sliders)})")
            return key
        for i, spec in enumerate(self.sliders):
            if spec.name == key:
                return i
        raise KeyError(f"Unknown parameter: {key}")

    def set_parameter(self, key: Union[int, str], value: float, update: bool = True) -> float:
        """
        Set one parameter, clamped to its slider range and precision.

        Parameters
        ----------
        key : int or str
            Slider position or parameter name
        value : float
            Requested value
        update : bool
            Recompute the curve afterwards

        Returns
        -------
        float
            The value actually stored
        """
        with self._lock:
            index = self._slider_index(key)
            spec = self.sliders[index]
            stored = spec.clamp(value) if spec.usable else spec.round(value)
            self.parameters[index] = stored
            if update:
                self.update_curve()
        return stored

    def reset_parameters(self, update: bool = True) -> List[float]:
        """Restore the best-fit parameter values."""
        with self._lock:
            if self.package is not None:
                self.parameters = list(self.package.defaults)
            if update:
                self.update_curve()
            return list(self.parameters)

    def select_spectrum(self, label: str, update: bool = True) -> str:
        """
        Select the spectrum to display.

        Raises
        ------
        UnknownSpectrumError
            If the current package has no spectrum with this label
        """
        with self._lock:
            for available in self.spectrum_labels:
                if available.casefold() == label.casefold():
                    self.selected = available
                    break
            else:
                raise UnknownSpectrumError(label, self.spectrum_labels)
            if update:
                self.update_curve()
            return self.selected

    # ------------------------------------------------------------------
    # Curve computation
    # ------------------------------------------------------------------

    def update_curve(self) -> List[PlotPoint]:
        """
        Run the model for the current parameters and extract the selected spectrum.

        Returns
        -------
        list of PlotPoint
            The curve now held by the session
        """
        with self._lock:
            if self.engine is None or self.package is None:
                self.curve = []
                return self.curve

            try:
                raw = self.engine.run(self.parameters)
            except ShapeMismatchError as e:
                logger.error(f"Parameter vector rejected: {e}")
                self.curve = []
                self.status = e.user_message
                return self.curve
            except EngineError as e:
                logger.warning(f"Inference failed, keeping previous curve: {e}")
                self.status = e.user_message
                return self.curve

            try:
                self.curve = extract(
                    raw, self.selected, self.package.outputs, self.package.coordinates
                )
            except ExtractError as e:
                logger.warning(f"Cannot extract {self.selected}, keeping previous curve: {e}")
                self.status = e.user_message
                return self.curve

            self.status = ""
            return self.curve

    def display_curve(self) -> List[Tuple[float, float]]:
        """Current curve as ``(display coordinate, value)`` pairs."""
        if not self.curve:
            return []
        x = self.axis.to_display(np.array([p.coordinate for p in self.curve]))
        return [(float(d), p.value) for d, p in zip(x, self.curve)]

    @property
    def y_limits(self) -> Tuple[float, float, float]:
        return axis.y_axis_limits(self.selected)

    def reference_data(self, directory: Union[str, Path]) -> List[PlotPoint]:
        """
        Reference band powers for the selected spectrum, if available.

        Parameters
        ----------
        directory : str or Path
            Directory holding ``<label>_data.txt`` files

        Returns
        -------
        list of PlotPoint
            Empty when no file exists for the selected spectrum
        """
        path = Path(directory) / reference_file_name(self.selected)
        if not path.exists():
            logger.debug(f"No reference data at {path}")
            return []
        return load_reference_data(path, self.selected)

    def summary(self) -> dict:
        """Description of the loaded model for display."""
        if self.package is None:
            return {}
        result: Dict[str, Any] = {
            "source": self.package.source,
            "parameters": [
                {
                    "name": spec.name,
                    "range": list(spec.range),
                    "step": spec.step,
                    "precision": spec.precision,
                    "default": default,
                    "usable": spec.usable,
                }
                for spec, default in zip(self.package.sliders, self.package.defaults)
            ],
            "spectra": self.spectrum_labels,
            "selected": self.selected,
            "coordinate_groups": {k: len(v) for k, v in self.package.coordinates.items()},
        }
        if self.engine is not None:
            result["input_width"] = self.engine.input_width
            result["output_size"] = self.engine.output_size
        return result
