"""Utility modules."""

from .logging_config import (
    setup_logging,
    ConsoleFormatter,
    JsonLinesFormatter,
)
from .validation import (
    validate_coordinates,
    parse_coordinate_pair,
    ValidationError,
)

__all__ = [
    # Logging
    "setup_logging",
    "ConsoleFormatter",
    "JsonLinesFormatter",
    # Validation
    "validate_coordinates",
    "parse_coordinate_pair",
    "ValidationError",
]
