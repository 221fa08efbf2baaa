"""File-backed key/value store for session state, the local-storage of the client."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

AUTH_KEY = "localhub_auth"
ADMIN_KEY = "admin_session"


class SessionStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("session_store_unreadable path=%s; discarding", self.path)
            self.path.unlink(missing_ok=True)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> Any:
        return self._read_all().get(key)

    def set(self, key: str, value: Any):
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str):
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
