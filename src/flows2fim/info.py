"""Inspection helpers for produced mosaics."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Tuple

import numpy as np
import rasterio
from rasterio.errors import RasterioIOError

from flows2fim.errors import ReadError

Bounds = Tuple[float, float, float, float]
Resolution = Tuple[float, float]


@dataclass(frozen=True)
class MosaicInfo:
    """Metadata extracted from a composite FIM on disk."""

    path: str
    driver: str
    crs: str | None
    bounds: Bounds
    width: int
    height: int
    resolution: Resolution
    dtype: str
    nodata: float | None
    source_count: int
    wet_ratio: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _sample_wet_ratio(dataset: Any) -> float | None:
    """Return the share of valid cells on a decimated read of band 1."""
    max_dim = 512
    scale = min(1.0, max_dim / max(dataset.width, dataset.height))
    height = max(1, int(dataset.height * scale))
    width = max(1, int(dataset.width * scale))
    data = dataset.read(1, out_shape=(height, width), masked=True)
    if not data.size:
        return None
    mask = np.ma.getmaskarray(data)
    if np.issubdtype(data.dtype, np.floating):
        mask = mask | np.isnan(np.ma.getdata(data))
    return float((~mask).sum() / data.size)


def inspect_mosaic(path: str, *, sample: bool = False) -> MosaicInfo:
    """Collect metadata about a mosaic, counting the files it references."""
    try:
        dataset = rasterio.open(path)
    except RasterioIOError as exc:
        raise ReadError(f"Error opening mosaic {path}: {exc}") from exc
    with dataset:
        bounds = dataset.bounds
        # dataset.files lists the dataset itself first, then any sources (VRT).
        source_count = max(0, len(dataset.files) - 1)
        return MosaicInfo(
            path=str(path),
            driver=dataset.driver,
            crs=dataset.crs.to_string() if dataset.crs else None,
            bounds=(bounds.left, bounds.bottom, bounds.right, bounds.top),
            width=dataset.width,
            height=dataset.height,
            resolution=(abs(dataset.res[0]), abs(dataset.res[1])),
            dtype=dataset.dtypes[0],
            nodata=dataset.nodata,
            source_count=source_count,
            wet_ratio=_sample_wet_ratio(dataset) if sample else None,
        )


def format_mosaic_info(info: MosaicInfo) -> list[str]:
    """Format mosaic metadata for logging."""
    left, bottom, right, top = info.bounds
    lines = [
        f"{info.path} ({info.driver})",
        f"size: {info.width} x {info.height}, dtype {info.dtype}, nodata {info.nodata}",
        f"crs: {info.crs or 'unknown'}",
        f"bounds: {left}, {bottom}, {right}, {top}",
        f"resolution: {info.resolution[0]} x {info.resolution[1]}",
        f"sources: {info.source_count}",
    ]
    if info.wet_ratio is not None:
        lines.append(f"wet ratio (sampled): {info.wet_ratio:.3f}")
    return lines
