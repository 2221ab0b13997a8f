"""Exception types raised by the flows2fim pipeline."""

from __future__ import annotations

from typing import Sequence


class Flows2FimError(RuntimeError):
    """Base class for pipeline failures surfaced to the CLI."""

    pass


class ReadError(Flows2FimError):
    """Raised when a control file cannot be opened or parsed."""

    pass


class ShapeError(Flows2FimError):
    """Raised when a control file lacks data rows or required columns."""

    pass


class MissingToolError(Flows2FimError):
    """Raised when a required GDAL executable is not available."""

    def __init__(self, tool: str) -> None:
        super().__init__(
            f"{tool} is not available. Please install GDAL and ensure {tool} is in your PATH."
        )
        self.tool = tool


class MosaicIOError(Flows2FimError):
    """Raised when a temporary artifact or the output cannot be written or moved."""

    pass


class ExternalToolError(Flows2FimError):
    """Raised when a GDAL executable exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        returncode: int,
        stderr: str = "",
    ) -> None:
        detail = stderr.strip()
        super().__init__(f"{message}: {detail}" if detail else message)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
