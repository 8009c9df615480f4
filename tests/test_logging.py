"""
Tests for logging configuration module.
"""

import pytest
import logging
from io import StringIO

from cmbemu.core.logging_config import setup_logging, get_logger


def test_setup_logging_default():
    """Test setting up logging with default parameters."""
    stream = StringIO()
    setup_logging(level="INFO", stream=stream)

    logger = logging.getLogger("cmbemu.test")
    logger.info("Test message")

    output = stream.getvalue()
    assert "Test message" in output
    assert "INFO" in output


def test_setup_logging_custom_level():
    """Test that DEBUG level lets debug records through."""
    stream = StringIO()
    setup_logging(level="DEBUG", stream=stream)

    get_logger("package.manifests").debug("Debug message")

    assert "Debug message" in stream.getvalue()


def test_setup_logging_custom_format():
    """Test setting up logging with custom format."""
    stream = StringIO()
    setup_logging(level="INFO", format_string="%(levelname)s - %(message)s", stream=stream)

    logging.getLogger("cmbemu.test").info("Test message")

    assert "INFO - Test message" in stream.getvalue()


def test_get_logger():
    """Loggers are namespaced under the package."""
    logger = get_logger("spectra.axis")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "cmbemu.spectra.axis"


def test_unusable_slider_logged():
    """Parser warnings reach the configured stream."""
    from cmbemu.package.manifests import parse_input_manifest

    stream = StringIO()
    setup_logging(level="WARNING", stream=stream)

    parse_input_manifest("h, 0.8, 0.6, 0.01")

    assert "unusable" in stream.getvalue()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
