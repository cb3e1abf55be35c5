from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


@dataclass
class MemoryStorage:
    """Session-scoped tier: dropped together with the process."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class FileStorage:
    """Durable tier: a JSON object on disk, survives restarts."""

    app_name: str = "metro-storefront"
    filename: str = "credentials.json"
    directory: Path | None = None

    def _path(self) -> Path:
        base = self.directory or Path(user_data_dir(self.app_name, "HanoiMetro"))
        base.mkdir(parents=True, exist_ok=True)
        return base / self.filename

    def _load(self) -> dict[str, str]:
        path = self._path()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("credential_file_corrupt", extra={"path": str(path)})
            path.unlink(missing_ok=True)
            return {}
        if not isinstance(data, dict):
            path.unlink(missing_ok=True)
            return {}
        return {str(key): str(value) for key, value in data.items() if value is not None}

    def _dump(self, data: dict[str, str]) -> None:
        path = self._path()
        if not data:
            path.unlink(missing_ok=True)
            return
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)
