"""FIM library path resolution.

A library is laid out as::

    <root>/<reach_id>/z_<boundary_condition>/f_<flow>.tif
    <root>/<reach_id>/domain.tif            (optional)

Boundary conditions use ``_`` in place of ``.`` in folder names, so a stage of
``53.5`` lives under ``z_53_5``. Resolution is purely syntactic; tiles are not
checked for existence.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Iterator, Literal

from flows2fim.controls import ControlRow

VSI_PREFIX = "/vsi"
DOMAIN_FILENAME = "domain.tif"

TileKind = Literal["domain", "fim"]


@dataclass(frozen=True)
class TileReference:
    """A resolved library tile tagged with its layer kind."""

    path: str
    kind: TileKind
    reach_id: str


@dataclass(frozen=True)
class ResolvedTile:
    """Paths resolved for one control row."""

    fim_path: str
    domain_path: str | None = None


@dataclass(frozen=True)
class OrderedFileList:
    """Tiles in mosaic layering order; later entries paint over earlier ones."""

    tiles: tuple[TileReference, ...]

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self) -> Iterator[TileReference]:
        return iter(self.tiles)

    def paths(self) -> list[str]:
        return [tile.path for tile in self.tiles]

    def of_kind(self, kind: TileKind) -> list[TileReference]:
        return [tile for tile in self.tiles if tile.kind == kind]


def is_vsi_path(path: str) -> bool:
    """Return True for GDAL virtual filesystem paths like /vsis3/bucket/key."""
    return path.startswith(VSI_PREFIX) or path.startswith("\\vsi")


def normalize_boundary_condition(value: str) -> str:
    """Return the folder-safe form of a boundary condition token."""
    return value.replace(".", "_")


def _vsi_safe(path: str) -> str:
    # os.path.join on Windows yields \vsis3\..., which GDAL does not accept.
    if is_vsi_path(path):
        return path.replace("\\", "/")
    return path


def _reach_segment(reach_id: str) -> str:
    # A leading separator would make os.path.join discard the library root.
    return reach_id.lstrip("/\\")


def fim_tile_path(library_root: str, row: ControlRow) -> str:
    folder = os.path.join(
        library_root,
        _reach_segment(row.reach_id),
        f"z_{normalize_boundary_condition(row.boundary_condition)}",
    )
    return _vsi_safe(os.path.join(folder, f"f_{row.flow_value}.tif"))


def domain_tile_path(library_root: str, reach_id: str) -> str:
    return _vsi_safe(os.path.join(library_root, _reach_segment(reach_id), DOMAIN_FILENAME))


def resolve_tile_paths(library_root: str, row: ControlRow, with_domain: bool) -> ResolvedTile:
    """Resolve the FIM tile (and optionally the domain tile) for a control row."""
    domain_path = domain_tile_path(library_root, row.reach_id) if with_domain else None
    return ResolvedTile(fim_path=fim_tile_path(library_root, row), domain_path=domain_path)


def build_file_list(
    rows: Iterable[ControlRow],
    library_root: str,
    *,
    with_domain: bool = False,
) -> OrderedFileList:
    """Resolve all rows into domain tiles (if requested) followed by FIM tiles."""
    domain_tiles: list[TileReference] = []
    fim_tiles: list[TileReference] = []
    for row in rows:
        resolved = resolve_tile_paths(library_root, row, with_domain)
        fim_tiles.append(TileReference(resolved.fim_path, "fim", row.reach_id))
        if resolved.domain_path is not None:
            domain_tiles.append(TileReference(resolved.domain_path, "domain", row.reach_id))
    return OrderedFileList(tuple(domain_tiles + fim_tiles))
