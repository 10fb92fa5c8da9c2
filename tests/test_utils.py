"""
Tests for utility modules: logging, validation.

Run with: pytest tests/test_utils.py -v
"""

import json
import logging

import pytest

from roofplan.utils import (
    ConsoleFormatter,
    JsonLinesFormatter,
    ValidationError,
    parse_coordinate_pair,
    setup_logging,
    validate_coordinates,
)
from roofplan.utils.logging_config import resolve_level


class TestLogging:
    """Tests for logging configuration."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        yield
        setup_logging(level="WARNING")

    def test_logger_has_handlers(self):
        """Test that logging is set up with handlers."""
        assert setup_logging() is None
        root = logging.getLogger()
        assert len(root.handlers) == 1

    def test_setup_level(self):
        setup_logging(level="debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("ROOFPLAN_LOG_LEVEL", "error")
        assert resolve_level(None) == logging.ERROR
        assert resolve_level("info") == logging.INFO

    def test_unknown_level_falls_back_to_info(self):
        assert resolve_level("chatty") == logging.INFO

    def test_context_appended(self):
        record = logging.LogRecord("roofplan.test", logging.INFO, __file__, 1, "Hiding segment", None, None)
        record.segment_id = 3
        formatted = ConsoleFormatter().format(record)
        assert formatted.endswith("roofplan.test: Hiding segment [segment_id=3]")

    def test_colour_only_on_level(self):
        record = logging.LogRecord("roofplan.test", logging.WARNING, __file__, 1, "Layer down", None, None)
        formatted = ConsoleFormatter(colour=True).format(record)
        assert "\033[33mWARNING \033[0m" in formatted
        assert formatted.endswith("Layer down")

    def test_json_lines(self):
        record = logging.LogRecord("roofplan.test", logging.WARNING, __file__, 1, "Layer %s down", ("mask",), None)
        record.raster = "mask.tif"
        record.error_type = "RasterReadError"
        entry = json.loads(JsonLinesFormatter().format(record))
        assert entry["message"] == "Layer mask down"
        assert entry["level"] == "WARNING"
        assert entry["raster"] == "mask.tif"
        assert entry["error_type"] == "RasterReadError"
        assert "segment_id" not in entry

    def test_log_to_file(self, tmp_path):
        log_file = tmp_path / "roofplan.log"
        assert setup_logging(level="WARNING", log_to_file=True, log_file=log_file) == log_file
        logging.getLogger("roofplan.test").debug("written", extra={"panel_id": 7})
        for handler in logging.getLogger().handlers:
            handler.flush()
        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["message"] == "written"
        assert entry["panel_id"] == 7

    def test_default_log_file_under_log_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ROOFPLAN_LOG_DIR", str(tmp_path / "runs"))
        path = setup_logging(log_to_file=True)
        assert path.parent == tmp_path / "runs"
        assert path.name.startswith("roofplan_")


class TestCoordinateValidation:
    """Tests for coordinate validation."""

    def test_valid_coordinates(self):
        assert validate_coordinates(52.2297, 21.0122) == (52.2297, 21.0122)

    def test_string_coordinates(self):
        assert validate_coordinates("52.5", "21") == (52.5, 21.0)

    def test_latitude_out_of_range(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_coordinates(95.0, 21.0)
        assert exc_info.value.field == "latitude"

    def test_longitude_out_of_range(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_coordinates(52.0, 200.0)
        assert exc_info.value.field == "longitude"

    def test_not_numbers(self):
        with pytest.raises(ValidationError):
            validate_coordinates("north", 21.0)

    def test_parse_pair(self):
        assert parse_coordinate_pair("52.1, 21.2") == (52.1, 21.2)

    def test_parse_pair_wrong_shape(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_coordinate_pair("52.1")
        assert exc_info.value.suggestions
