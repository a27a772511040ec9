"""Local snapshot persistence so a restarted client can resume."""
from __future__ import annotations

import json
import os
from typing import Optional

from config.settings import settings

from .models import SessionSnapshot

DEFAULT_SLOT = "interviewee"


def _snapshot_path(slot: str, base_dir: Optional[str] = None) -> str:
    return os.path.join(base_dir or settings.SNAPSHOT_DIR, f"{slot}.json")


def save_snapshot(snapshot: SessionSnapshot, slot: str = DEFAULT_SLOT, base_dir: Optional[str] = None) -> str:
    """Persist the snapshot atomically and return the file path."""
    path = _snapshot_path(slot, base_dir)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    tmp_path = path + ".tmp"
    with open(tmp_path, "w", encoding="utf-8") as handle:
        json.dump(snapshot.to_wire(), handle, ensure_ascii=False)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)
    return path


def load_snapshot(slot: str = DEFAULT_SLOT, base_dir: Optional[str] = None) -> Optional[SessionSnapshot]:
    """Load the stored snapshot if present."""
    path = _snapshot_path(slot, base_dir)
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    return SessionSnapshot.model_validate(data)


def clear_snapshot(slot: str = DEFAULT_SLOT, base_dir: Optional[str] = None) -> None:
    path = _snapshot_path(slot, base_dir)
    if os.path.exists(path):
        os.remove(path)
