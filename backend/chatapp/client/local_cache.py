"""
Local cache of the active session id.

Stored as a small versioned JSON file. The value is only a hint: the
session state validates it against the server's list before using it.
"""

import json
from pathlib import Path
from typing import Optional
from uuid import UUID

from chatapp.core.logger import logger

CACHE_VERSION = 1


class LocalSessionCache:
    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load_active_session_id(self) -> Optional[str]:
        """Return the cached id, or None if missing, stale or unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable session cache {self.path}: {e}")
            self.clear()
            return None

        if not isinstance(data, dict) or data.get("version") != CACHE_VERSION:
            logger.info(f"Discarding session cache with unknown version: {self.path}")
            self.clear()
            return None

        session_id = data.get("active_session_id")
        if session_id is None:
            return None
        try:
            return str(UUID(str(session_id)))
        except ValueError:
            logger.info(f"Discarding invalid cached session id: {session_id!r}")
            self.clear()
            return None

    def save_active_session_id(self, session_id: Optional[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": CACHE_VERSION, "active_session_id": session_id}
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
