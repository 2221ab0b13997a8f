"""Cleanup helpers for temporary artifacts left behind by interrupted runs."""

from __future__ import annotations

from pathlib import Path

from flows2fim.mosaic import LIST_PREFIX, TEMP_PREFIX


def find_orphans(output_dir: Path, *, temp_dir: Path | None = None) -> list[Path]:
    """Return temporary VRTs (and file lists, if temp_dir is given) left on disk."""
    candidates = list(output_dir.glob(f"{TEMP_PREFIX}*.vrt"))
    if temp_dir:
        candidates.extend(temp_dir.glob(f"{TEMP_PREFIX}*.vrt"))
        candidates.extend(temp_dir.glob(f"{LIST_PREFIX}*.txt"))
    seen = set()
    orphans: list[Path] = []
    for path in sorted(candidates):
        resolved = path.resolve()
        if resolved in seen or not path.is_file():
            continue
        seen.add(resolved)
        orphans.append(path)
    return orphans


def clean_temp_artifacts(
    output_dir: Path,
    *,
    temp_dir: Path | None = None,
    dry_run: bool = True,
) -> dict[str, object]:
    """Remove orphaned temporary artifacts and return a summary report.

    Only run this when no flows2fim run is writing to the same directories;
    an in-flight run's temporary files look the same as orphans.
    """
    orphans = find_orphans(output_dir, temp_dir=temp_dir)
    if not dry_run:
        for path in orphans:
            path.unlink(missing_ok=True)
    return {
        "output_dir": str(output_dir),
        "dry_run": dry_run,
        "removed": [str(path) for path in orphans],
    }


def format_clean_summary(report: dict[str, object]) -> list[str]:
    """Format a summary of clean results for logging."""
    removed = report.get("removed") or []
    dry_run = report.get("dry_run")
    count = len(removed) if isinstance(removed, list) else 0
    lines = [f"Clean {'dry-run' if dry_run else 'complete'} for {report.get('output_dir')}"]
    lines.append(f"temporary artifacts: {count} item(s)")
    if isinstance(removed, list):
        lines.extend(f"  {path}" for path in removed)
    if dry_run and count:
        lines.append("Dry run only; re-run with --confirm to delete.")
    return lines
