"""
roofplan - Rooftop PV survey visualisation and proposal sizing.

Maps building survey payloads into a consistent 3D roof scene (segment
planes, footprints, panel placements), enriches it from irradiance
rasters, and sizes net-billing PV proposals three ways.
"""

__version__ = "0.1.0"
