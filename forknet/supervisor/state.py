"""JSON state file helpers shared by the fork registry and glue handle."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from forknet.errors import StateWriteError

logger = logging.getLogger("forknet.supervisor.state")


def read_json_object(path: Path) -> dict[str, Any] | None:
    """Read a JSON object from path; missing, empty or invalid files yield None."""
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Unable to read state file %s: %s", path, exc)
        return None
    if not text.strip():
        return None
    try:
        payload = json.loads(text)
    except ValueError:
        logger.warning("Ignoring unparsable state file %s", path)
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def write_json_atomic(path: Path, payload: Any) -> None:
    """Overwrite path with payload via a temp file and rename."""
    temp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        temp_path.replace(path)
    except OSError as exc:
        raise StateWriteError(f"failed to write {path}: {exc}") from exc


def remove_file(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        raise StateWriteError(f"failed to remove {path}: {exc}") from exc
