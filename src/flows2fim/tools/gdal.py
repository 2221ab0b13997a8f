"""Wrappers for the GDAL executables used to build and convert mosaics."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Protocol

from flows2fim.subprocess_utils import CommandResult, run_command
from flows2fim.tools.config import load_tool_paths

BUILDVRT = "gdalbuildvrt"
TRANSLATE = "gdal_translate"
TRANSLATE_OPTIONS = ("-co", "COMPRESS=LZW", "-co", "NUM_THREADS=ALL_CPUS")

ToolAvailability = Callable[[str], bool]


class MosaicTools(Protocol):
    """Operations the mosaic assembler delegates to external tools."""

    def build_mosaic(self, list_file: Path, out_file: str) -> CommandResult:
        ...

    def convert(self, in_file: str, output_format: str, out_file: str) -> CommandResult:
        ...


def resolve_tool(name: str, tool_paths: Mapping[str, Path] | None = None) -> str | None:
    """Return an executable for a GDAL tool, or None if it cannot be found."""
    paths = load_tool_paths() if tool_paths is None else tool_paths
    configured = paths.get(name)
    if configured:
        return str(configured) if configured.exists() else None
    return shutil.which(name)


def gdal_tool_available(name: str) -> bool:
    """Default ToolAvailability backed by the tool config and PATH."""
    return resolve_tool(name) is not None


def buildvrt_command(executable: str, list_file: Path, out_file: str) -> list[str]:
    return [executable, "-input_file_list", str(list_file), out_file]


def translate_command(
    executable: str,
    in_file: str,
    output_format: str,
    out_file: str,
) -> list[str]:
    return [executable, *TRANSLATE_OPTIONS, "-of", output_format, in_file, out_file]


class GdalTools:
    """MosaicTools implementation that shells out to gdalbuildvrt/gdal_translate."""

    def __init__(self, tool_paths: Mapping[str, Path] | None = None) -> None:
        self._tool_paths = load_tool_paths() if tool_paths is None else dict(tool_paths)

    def _executable(self, name: str) -> str:
        return resolve_tool(name, self._tool_paths) or name

    def build_mosaic(self, list_file: Path, out_file: str) -> CommandResult:
        return run_command(buildvrt_command(self._executable(BUILDVRT), list_file, out_file))

    def convert(self, in_file: str, output_format: str, out_file: str) -> CommandResult:
        return run_command(
            translate_command(self._executable(TRANSLATE), in_file, output_format, out_file)
        )
