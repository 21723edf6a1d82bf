"""Helpers for JSON input and atomic binary output."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any

from ..errors import ConfigInvalidError


def read_json(path: Path) -> dict[str, Any]:
    """Read JSON from *path* and return a dictionary."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise ConfigInvalidError(f"JSON file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigInvalidError(f"Invalid JSON data in {path}") from exc
    if not isinstance(data, dict):
        raise ConfigInvalidError(f"Expected a JSON object in {path}")
    return data


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomically write *data* into *path*."""

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    path.parent.mkdir(parents=True, exist_ok=True)
    with tmp_path.open("wb") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
    # ``Path.replace`` can intermittently fail on Windows while another process
    # (antivirus, indexers) briefly holds the destination.  Retry with a short
    # back-off and never unlink the existing destination.
    for attempt in range(5):
        try:
            tmp_path.replace(path)
            return
        except PermissionError:
            if attempt == 4:
                tmp_path.unlink(missing_ok=True)
                raise
            time.sleep(0.05 * (attempt + 1))
