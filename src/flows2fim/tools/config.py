"""Locate GDAL executables through an optional JSON map."""

from __future__ import annotations

import json
import os
from pathlib import Path

ENV_TOOL_PATHS = "FLOWS2FIM_TOOL_PATHS"


def _read_tool_map(config_path: Path) -> dict[str, Path]:
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {name: Path(exe) for name, exe in data.items() if isinstance(exe, str)}


def load_tool_paths(path: Path | None = None) -> dict[str, Path]:
    """Return tool name -> executable from ``path`` or ``$FLOWS2FIM_TOOL_PATHS``.

    Without either, or when the file is unreadable, the mapping is empty and
    tools are looked up on PATH.
    """
    if path is None:
        env_path = os.environ.get(ENV_TOOL_PATHS)
        if not env_path:
            return {}
        path = Path(env_path)
    return _read_tool_map(path)
