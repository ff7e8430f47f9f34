"""Local JSON file key-value store."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from manga_strip.domain.errors import PersistenceError
from manga_strip.services.projects import KeyValueStore


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps every key in one JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Write the value for a key, replacing the file atomically."""
        try:
            values = self._read()
        except PersistenceError:
            values = {}
        values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(values), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Unreadable state file {self.path}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"Unexpected state file layout in {self.path}")
        return data
