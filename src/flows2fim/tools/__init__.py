"""Tool wrapper exports."""

from flows2fim.tools.gdal import (
    BUILDVRT,
    TRANSLATE,
    GdalTools,
    MosaicTools,
    ToolAvailability,
    gdal_tool_available,
    resolve_tool,
)

__all__ = [
    "BUILDVRT",
    "TRANSLATE",
    "GdalTools",
    "MosaicTools",
    "ToolAvailability",
    "gdal_tool_available",
    "resolve_tool",
]
