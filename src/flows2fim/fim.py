"""Composite FIM pipeline: controls -> tile list -> mosaic."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from flows2fim.controls import read_controls
from flows2fim.errors import MissingToolError
from flows2fim.library import OrderedFileList, build_file_list, is_vsi_path
from flows2fim.mosaic import VIRTUAL_FORMAT, assemble_mosaic, normalize_output_format
from flows2fim.tools.gdal import (
    BUILDVRT,
    TRANSLATE,
    GdalTools,
    MosaicTools,
    ToolAvailability,
    gdal_tool_available,
)

LOGGER = logging.getLogger(__name__)
LIBRARY_TYPES = ("depth", "extent")


@dataclass(frozen=True)
class FimResult:
    """Outcome of a composite FIM run."""

    output_path: str
    output_format: str
    file_list: OrderedFileList


def required_tools(output_format: str) -> list[str]:
    """Return the GDAL tools needed to produce an output format."""
    tools = [BUILDVRT]
    if normalize_output_format(output_format) != VIRTUAL_FORMAT:
        tools.append(TRANSLATE)
    return tools


def check_tools(output_format: str, available: ToolAvailability) -> None:
    """Raise MissingToolError for the first required tool that is unavailable."""
    for tool in required_tools(output_format):
        if not available(tool):
            LOGGER.error("GDAL tool missing: %s", tool)
            raise MissingToolError(tool)


def absolute_path(path: str) -> str:
    """Absolutize a local path; GDAL /vsi paths are returned unchanged."""
    if is_vsi_path(path):
        return path
    return os.path.abspath(path)


def run_fim(
    *,
    library_root: str,
    controls_path: Path,
    output_path: str,
    output_format: str = VIRTUAL_FORMAT,
    with_domain: bool = False,
    library_type: str | None = None,
    tools: MosaicTools | None = None,
    tool_available: ToolAvailability | None = None,
) -> FimResult:
    """Create a composite flood inundation map for the control conditions."""
    fmt = normalize_output_format(output_format)
    check_tools(fmt, tool_available or gdal_tool_available)
    if library_type:
        LOGGER.debug("Library type %r is accepted for compatibility and ignored", library_type)

    abs_library = absolute_path(str(library_root))
    abs_output = absolute_path(str(output_path))

    rows = read_controls(Path(controls_path))
    LOGGER.info("Read %s control row(s) from %s", len(rows), controls_path)

    file_list = build_file_list(rows, abs_library, with_domain=with_domain)
    LOGGER.debug(
        "Resolved %s FIM tile(s) and %s domain tile(s) under %s",
        len(file_list.of_kind("fim")),
        len(file_list.of_kind("domain")),
        abs_library,
    )
    for tile in file_list:
        LOGGER.debug("%s tile %s", tile.kind, tile.path, extra={"reach": tile.reach_id})

    assemble_mosaic(file_list, abs_output, fmt, tools or GdalTools())
    LOGGER.info("Composite FIM created at %s", abs_output)
    return FimResult(output_path=abs_output, output_format=fmt, file_list=file_list)
