"""
Input validation utilities for roofplan.

Usage:
    from roofplan.utils.validation import validate_coordinates, ValidationError

    lat, lon = validate_coordinates(52.2297, 21.0122)
"""

from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "", suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field = field
        self.suggestions = suggestions or []


def validate_coordinates(lat: float, lon: float) -> Tuple[float, float]:
    """
    Validate WGS84 coordinates.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees

    Returns:
        Tuple of (lat, lon) as floats

    Raises:
        ValidationError: If coordinates are invalid
    """
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        raise ValidationError(
            "Coordinates must be numbers",
            field="coordinates",
        )

    if not -90 <= lat <= 90:
        raise ValidationError(
            f"Latitude {lat} out of range",
            field="latitude",
            suggestions=["Latitude must be between -90 and 90"],
        )
    if not -180 <= lon <= 180:
        raise ValidationError(
            f"Longitude {lon} out of range",
            field="longitude",
            suggestions=["Longitude must be between -180 and 180"],
        )

    # Polar regions break the local equirectangular projection
    if abs(lat) > 85:
        logger.warning(f"Latitude {lat} is too close to a pole for local projection")

    return lat, lon


def parse_coordinate_pair(text: str) -> Tuple[float, float]:
    """Parse "lat,lon" into validated floats."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        raise ValidationError(
            f"Expected 'lat,lon', got '{text}'",
            field="coordinates",
            suggestions=["Example: 52.2297,21.0122"],
        )
    return validate_coordinates(parts[0], parts[1])
