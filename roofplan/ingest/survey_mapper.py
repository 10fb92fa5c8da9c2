"""
Building survey mapper.

Normalises a building survey payload (Solar API building insights and
similar shapes) into SolarViewData. Upstream payloads nest fields
inconsistently and omit many of them, so every field is resolved through an
explicit rule table:

    FieldRule(target, source paths tried in order, default)

Keeping the fallbacks in tables makes them auditable and testable on their
own. Bounding boxes are decoded as a tagged variant: either an explicit
vertex list or a sw/ne pair expanded to SW -> SE -> NE -> NW.

Usage:
    view = map_building_survey(json.loads(path.read_text()))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..core.config import Settings, settings as default_settings
from ..core.models import (
    GeoPoint,
    PanelDimensions,
    PanelOrientation,
    Segment,
    SolarPanelPlacement,
    SolarViewData,
)

logger = logging.getLogger(__name__)


class SurveyFormatError(ValueError):
    """Raised when a survey payload cannot be normalised."""


class Fallback(Enum):
    """Defaults that depend on context rather than a constant."""

    POSITION = "position"            # index of the item in its list
    BUILDING_CENTER = "building_center"
    SETTINGS = "settings"            # value taken from Settings


KeyPath = Tuple[str, ...]


@dataclass(frozen=True)
class FieldRule:
    """One target field and where to find it upstream."""

    target: str
    sources: Tuple[KeyPath, ...]
    default: Any = None
    decode: Optional[Callable[[Any], Any]] = None
    setting: Optional[str] = None  # Settings attribute when default is Fallback.SETTINGS


# =============================================================================
# DECODERS
# =============================================================================


def decode_point(raw: Any) -> Optional[GeoPoint]:
    """{latitude, longitude} -> GeoPoint, None when incomplete."""
    if not isinstance(raw, Mapping):
        return None
    lat, lon = raw.get("latitude"), raw.get("longitude")
    if lat is None or lon is None:
        return None
    return GeoPoint(latitude=float(lat), longitude=float(lon))


def rectangle_corners(sw: GeoPoint, ne: GeoPoint) -> Tuple[GeoPoint, ...]:
    """Corners of a sw/ne box in SW -> SE -> NE -> NW order."""
    return (
        GeoPoint(latitude=sw.latitude, longitude=sw.longitude),
        GeoPoint(latitude=sw.latitude, longitude=ne.longitude),
        GeoPoint(latitude=ne.latitude, longitude=ne.longitude),
        GeoPoint(latitude=ne.latitude, longitude=sw.longitude),
    )


def decode_boundary(raw: Any) -> Optional[Tuple[GeoPoint, ...]]:
    """
    Decode a segment bounding box.

    Variants:
        {"vertices": [{latitude, longitude}, ...]}
        {"sw": {...}, "ne": {...}}
    """
    if not isinstance(raw, Mapping):
        return None

    vertices = raw.get("vertices")
    if isinstance(vertices, Sequence) and not isinstance(vertices, str) and vertices:
        points = tuple(p for p in (decode_point(v) for v in vertices) if p is not None)
        return points or None

    sw, ne = decode_point(raw.get("sw")), decode_point(raw.get("ne"))
    if sw is not None and ne is not None:
        return rectangle_corners(sw, ne)
    return None


def decode_orientation(raw: Any) -> Optional[PanelOrientation]:
    if isinstance(raw, str) and raw.upper() in PanelOrientation.__members__:
        return PanelOrientation[raw.upper()]
    return None


# =============================================================================
# MAPPING TABLES
# =============================================================================


SEGMENT_FIELDS: Tuple[FieldRule, ...] = (
    FieldRule("id", (("segmentIndex",), ("index",)), Fallback.POSITION),
    FieldRule("center", (("center",),), Fallback.BUILDING_CENTER, decode=decode_point),
    FieldRule("plane_height_at_center_m", (("planeHeightAtCenterMeters",),), 0.0),
    FieldRule("tilt_deg", (("pitchDegrees",), ("tiltDegrees",)), 0.0),
    FieldRule("azimuth_deg", (("azimuthDegrees",),), 180.0),
    FieldRule("boundary", (("boundingBox",),), None, decode=decode_boundary),
    FieldRule("area_m2", (("roofAreaMeters2",), ("stats", "areaMeters2")), None),
)

PANEL_FIELDS: Tuple[FieldRule, ...] = (
    FieldRule("id", (("id",),), Fallback.POSITION),
    FieldRule("segment_index", (("segmentIndex",),), 0),
    FieldRule("center", (("center",),), Fallback.BUILDING_CENTER, decode=decode_point),
    FieldRule("orientation", (("orientation",),), PanelOrientation.PORTRAIT, decode=decode_orientation),
    FieldRule("yearly_energy_dc_kwh", (("yearlyEnergyDcKwh",), ("yearlyEnergyDc",)), None),
)

PANEL_DIMENSION_FIELDS: Tuple[FieldRule, ...] = (
    FieldRule("width_m", (("panelWidthMeters",),), Fallback.SETTINGS, setting="default_panel_width_m"),
    FieldRule("height_m", (("panelHeightMeters",),), Fallback.SETTINGS, setting="default_panel_height_m"),
    FieldRule("thickness_m", (), Fallback.SETTINGS, setting="default_panel_thickness_m"),
)

# Lists are looked up under solarPotential first, then at the top level
SEGMENT_LIST_SOURCES: Tuple[KeyPath, ...] = (("solarPotential", "roofSegmentStats"), ("roofSegmentStats",))
PANEL_LIST_SOURCES: Tuple[KeyPath, ...] = (("solarPotential", "solarPanels"), ("solarPanels",))


# =============================================================================
# RESOLUTION
# =============================================================================


def lookup(payload: Any, path: KeyPath) -> Any:
    """Follow a key path through nested mappings; None when absent."""
    node = payload
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def resolve_fields(
    raw: Any,
    rules: Sequence[FieldRule],
    position: int = 0,
    building_center: Optional[GeoPoint] = None,
    config: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Apply a rule table to one upstream record."""
    config = config or default_settings
    resolved: Dict[str, Any] = {}

    for rule in rules:
        value = None
        for path in rule.sources:
            candidate = lookup(raw, path)
            if candidate is not None and rule.decode is not None:
                candidate = rule.decode(candidate)
            if candidate is not None:
                value = candidate
                break

        if value is None:
            value = _default_for(rule, position, building_center, config)
        resolved[rule.target] = value

    return resolved


def _default_for(
    rule: FieldRule,
    position: int,
    building_center: Optional[GeoPoint],
    config: Settings,
) -> Any:
    if rule.default is Fallback.POSITION:
        return position
    if rule.default is Fallback.BUILDING_CENTER:
        return building_center or GeoPoint(latitude=0.0, longitude=0.0)
    if rule.default is Fallback.SETTINGS:
        return getattr(config, rule.setting)
    return rule.default


def _records(payload: Mapping, sources: Sequence[KeyPath]) -> List[Any]:
    for path in sources:
        items = lookup(payload, path)
        if isinstance(items, list):
            return items
    return []


def fallback_segment(payload: Mapping) -> Optional[Segment]:
    """Flat segment covering the building bounding box, if there is one."""
    box = payload.get("boundingBox")
    if not isinstance(box, Mapping):
        return None
    sw, ne = decode_point(box.get("sw")), decode_point(box.get("ne"))
    if sw is None or ne is None:
        return None
    center = GeoPoint(
        latitude=(sw.latitude + ne.latitude) / 2,
        longitude=(sw.longitude + ne.longitude) / 2,
    )
    return Segment(
        id=0,
        center=center,
        plane_height_at_center_m=0.0,
        tilt_deg=0.0,
        azimuth_deg=180.0,
        boundary=rectangle_corners(sw, ne),
    )


def map_building_survey(payload: Any, config: Optional[Settings] = None) -> SolarViewData:
    """
    Map a building survey payload to SolarViewData.

    Args:
        payload: Decoded JSON of the survey (building insights)
        config: Settings providing panel dimension defaults

    Returns:
        SolarViewData; origin is the building center when present

    Raises:
        SurveyFormatError: If the payload is not an object, a resolved
            value is out of range or two segments share an id
    """
    if not isinstance(payload, Mapping):
        raise SurveyFormatError(f"Survey payload must be an object, got {type(payload).__name__}")

    config = config or default_settings
    solar_potential = payload.get("solarPotential")
    dims_source = solar_potential if isinstance(solar_potential, Mapping) else payload

    try:
        building_center = decode_point(payload.get("center"))
        dims = PanelDimensions(**resolve_fields(dims_source, PANEL_DIMENSION_FIELDS, config=config))

        segments = [
            Segment(**resolve_fields(raw, SEGMENT_FIELDS, i, building_center, config))
            for i, raw in enumerate(_records(payload, SEGMENT_LIST_SOURCES))
        ]
        panels = [
            SolarPanelPlacement(**resolve_fields(raw, PANEL_FIELDS, i, building_center, config))
            for i, raw in enumerate(_records(payload, PANEL_LIST_SOURCES))
        ]

        if not segments:
            synthesized = fallback_segment(payload)
            if synthesized is not None:
                logger.info("No roof segments in survey; using building bounding box")
                segments.append(synthesized)

        view = SolarViewData(
            segments=tuple(segments),
            panels=tuple(panels),
            panel_dimensions=dims,
            origin=building_center,
        )
    except (PydanticValidationError, TypeError, ValueError) as e:
        raise SurveyFormatError(f"Malformed survey payload: {e}") from e

    logger.info(f"Mapped survey: {len(segments)} segments, {len(panels)} panels")
    return view
