"""Export modules for external renderers."""

from .scene_json import SceneJSONExporter

__all__ = ["SceneJSONExporter"]
