from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, Tuple

import numpy as np
import rasterio
from rasterio.transform import from_bounds

from flows2fim.subprocess_utils import CommandResult


def write_raster(
    path: Path,
    data: np.ndarray,
    *,
    bounds: Tuple[float, float, float, float],
    crs: str = "EPSG:4326",
    nodata: float | None = None,
) -> None:
    height, width = data.shape
    transform = from_bounds(*bounds, width=width, height=height)
    path.parent.mkdir(parents=True, exist_ok=True)
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=1,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dataset:
        dataset.write(data, 1)


def write_controls(path: Path, rows: Sequence[Sequence[str]]) -> Path:
    """Write a controls CSV with the standard header."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(["reach_id", "flow", "control_stage"])
        writer.writerows(rows)
    return path


@dataclass
class FakeTools:
    """In-memory MosaicTools that records calls and can simulate failures."""

    build_returncode: int = 0
    convert_returncode: int = 0
    stderr: str = "simulated failure"
    calls: list[tuple] = field(default_factory=list)
    listed_paths: list[str] = field(default_factory=list)

    def build_mosaic(self, list_file: Path, out_file: str) -> CommandResult:
        self.listed_paths = list_file.read_text(encoding="utf-8").splitlines()
        self.calls.append(("build_mosaic", list_file, out_file))
        command = ["gdalbuildvrt", "-input_file_list", str(list_file), out_file]
        if self.build_returncode:
            return CommandResult(command, self.build_returncode, "", self.stderr)
        sources = "".join(f"  <Source>{path}</Source>\n" for path in self.listed_paths)
        Path(out_file).write_text(f"<VRTDataset>\n{sources}</VRTDataset>\n", encoding="utf-8")
        return CommandResult(command, 0, "", "")

    def convert(self, in_file: str, output_format: str, out_file: str) -> CommandResult:
        self.calls.append(("convert", in_file, output_format, out_file))
        command = ["gdal_translate", "-of", output_format, in_file, out_file]
        if self.convert_returncode:
            return CommandResult(command, self.convert_returncode, "", self.stderr)
        Path(out_file).write_text(
            f"{output_format}:{Path(in_file).read_text(encoding='utf-8')}",
            encoding="utf-8",
        )
        return CommandResult(command, 0, "", "")


def with_src_env(base_env: dict[str, str] | None = None) -> dict[str, str]:
    """Return an environment with repo src/ on PYTHONPATH."""
    env = dict(base_env or os.environ)
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    if src_path.exists():
        existing = env.get("PYTHONPATH", "")
        entries = [entry for entry in existing.split(os.pathsep) if entry]
        src_str = str(src_path)
        if src_str not in entries:
            entries.insert(0, src_str)
        env["PYTHONPATH"] = os.pathsep.join(entries)
    return env
