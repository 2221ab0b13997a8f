"""Environment and dependency checks for flows2fim."""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from flows2fim.tools.config import load_tool_paths
from flows2fim.tools.gdal import BUILDVRT, TRANSLATE, resolve_tool

MIN_PYTHON = (3, 10)


@dataclass(frozen=True)
class CheckResult:
    """Result of a single doctor check."""

    name: str
    status: str
    detail: str


def _status(name: str, status: str, detail: str) -> CheckResult:
    return CheckResult(name=name, status=status, detail=detail)


def check_python_version() -> CheckResult:
    """Verify the running Python meets the minimum version."""
    if sys.version_info < MIN_PYTHON:
        return _status(
            "python",
            "error",
            f"Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]}+ required",
        )
    return _status("python", "ok", f"{sys.version_info.major}.{sys.version_info.minor}")


def check_python_deps() -> Iterable[CheckResult]:
    """Verify that rasterio (and the GDAL it bundles) can be imported."""
    results = []
    try:
        import rasterio

        results.append(_status("rasterio", "ok", rasterio.__version__))
        results.append(_status("gdal", "ok", rasterio.__gdal_version__))
    except ImportError as exc:  # pragma: no cover - import failure path
        results.append(_status("rasterio", "error", str(exc)))
    return results


def check_gdal_tool(name: str, tool_paths: Mapping[str, Path]) -> CheckResult:
    """Check a GDAL executable for availability and report its version."""
    executable = resolve_tool(name, tool_paths)
    if not executable:
        return _status(name, "error", "command not found")
    try:
        result = subprocess.run(
            [executable, "--version"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        return _status(name, "error", str(exc))
    if result.returncode != 0:
        return _status(name, "warn", f"non-zero exit: {result.returncode}")
    return _status(name, "ok", result.stdout.strip() or executable)


def run_doctor(tool_paths: Mapping[str, Path] | None = None) -> list[CheckResult]:
    """Run all environment checks and return the aggregated results."""
    paths = load_tool_paths() if tool_paths is None else tool_paths
    results = [check_python_version(), *check_python_deps()]
    results.append(check_gdal_tool(BUILDVRT, paths))
    results.append(check_gdal_tool(TRANSLATE, paths))
    return results
