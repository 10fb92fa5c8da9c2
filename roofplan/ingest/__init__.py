"""Ingest Module - Normalise upstream building survey payloads."""

from .survey_mapper import (
    PANEL_DIMENSION_FIELDS,
    PANEL_FIELDS,
    SEGMENT_FIELDS,
    Fallback,
    FieldRule,
    SurveyFormatError,
    decode_boundary,
    decode_point,
    map_building_survey,
    resolve_fields,
)

__all__ = [
    "PANEL_DIMENSION_FIELDS",
    "PANEL_FIELDS",
    "SEGMENT_FIELDS",
    "Fallback",
    "FieldRule",
    "SurveyFormatError",
    "decode_boundary",
    "decode_point",
    "map_building_survey",
    "resolve_fields",
]
