"""Mosaic assembly: file list -> temporary VRT -> final output."""

from __future__ import annotations

import logging
import os
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from flows2fim.errors import ExternalToolError, MosaicIOError
from flows2fim.library import OrderedFileList, is_vsi_path
from flows2fim.subprocess_utils import CommandResult, format_command
from flows2fim.tools.gdal import MosaicTools

LOGGER = logging.getLogger(__name__)

VIRTUAL_FORMAT = "VRT"
OUTPUT_FORMATS = (VIRTUAL_FORMAT, "COG", "GTIFF")
TEMP_PREFIX = ".flows2fim-"
LIST_PREFIX = "flows2fim-"


def normalize_output_format(value: str) -> str:
    """Return the canonical (upper-case) output format name."""
    fmt = value.strip().upper()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format: {value!r} (expected one of {', '.join(OUTPUT_FORMATS)})"
        )
    return fmt


@contextmanager
def temporary_file_list(paths: Iterable[str]) -> Iterator[Path]:
    """Write paths one per line to a temp file, removed when the block exits."""
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            prefix=LIST_PREFIX,
            suffix=".txt",
            delete=False,
        )
    except OSError as exc:
        raise MosaicIOError(f"Error creating temporary file list: {exc}") from exc
    list_path = Path(handle.name)
    try:
        try:
            with handle:
                for path in paths:
                    handle.write(f"{path}\n")
        except OSError as exc:
            raise MosaicIOError(f"Error writing file list to {list_path}: {exc}") from exc
        yield list_path
    finally:
        list_path.unlink(missing_ok=True)


def temp_vrt_path(output_path: str) -> str:
    """Pick a unique temporary VRT path for an output.

    Local outputs get a sibling file so the final rename stays on one
    filesystem and GDAL's relative source paths remain valid after the move.
    """
    name = f"{TEMP_PREFIX}{uuid.uuid4().hex}.vrt"
    if is_vsi_path(output_path):
        return os.path.join(tempfile.gettempdir(), name)
    return os.path.join(os.path.dirname(output_path), name)


@contextmanager
def temporary_vrt(output_path: str) -> Iterator[str]:
    """Reserve a temporary VRT path, removing whatever is left there on exit.

    Directories created for the output are removed again if no output was
    produced.
    """
    path = temp_vrt_path(output_path)
    created = _missing_parents(Path(path).parent)
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
    except OSError as exc:
        raise MosaicIOError(f"Error creating directory for {path}: {exc}") from exc
    try:
        yield path
    finally:
        Path(path).unlink(missing_ok=True)
        if not os.path.exists(output_path):
            _remove_empty_dirs(created)


def _missing_parents(directory: Path) -> list[Path]:
    """Return directories that makedirs would create, deepest first."""
    missing: list[Path] = []
    current = directory
    while not current.exists() and current != current.parent:
        missing.append(current)
        current = current.parent
    return missing


def _remove_empty_dirs(directories: list[Path]) -> None:
    for directory in directories:
        if directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()


def _check(result: CommandResult, message: str) -> None:
    if not result.ok:
        LOGGER.debug("Failed command: %s", format_command(result.command))
        raise ExternalToolError(
            message,
            command=result.command,
            returncode=result.returncode,
            stderr=result.stderr,
        )


def assemble_mosaic(
    file_list: OrderedFileList,
    output_path: str,
    output_format: str,
    tools: MosaicTools,
) -> str:
    """Build a VRT from the file list and place it, or a conversion of it, at output_path.

    VRT output is moved into place with a single atomic rename. Other formats
    are written in place by gdal_translate; a failed conversion may leave a
    partial file behind.
    """
    if not len(file_list):
        raise ValueError("At least one tile is required to build a mosaic.")
    fmt = normalize_output_format(output_format)

    with temporary_file_list(file_list.paths()) as list_path:
        LOGGER.debug("Wrote %s tile path(s) to %s", len(file_list), list_path)
        with temporary_vrt(output_path) as vrt_path:
            result = tools.build_mosaic(list_path, vrt_path)
            _check(result, "Error creating temp VRT")
            LOGGER.debug("Built temporary VRT %s", vrt_path)

            if fmt == VIRTUAL_FORMAT:
                LOGGER.debug("Moving temporary VRT %s to %s", vrt_path, output_path)
                try:
                    os.replace(vrt_path, output_path)
                except OSError as exc:
                    raise MosaicIOError(
                        f"Error renaming temp file {vrt_path} to {output_path}: {exc}"
                    ) from exc
            else:
                LOGGER.debug("Converting VRT to %s", fmt)
                result = tools.convert(vrt_path, fmt, output_path)
                _check(result, f"Error converting VRT to {fmt}")
    return output_path
