"""
client/storage.py -- Key/value persistence for the client session.

LocalStorage is a string-to-string store that mirrors itself into a JSON
document on disk after every write. It is the single place the client
keeps anything between runs: the bearer token, a backup copy of the user,
the theme and a pending post-login redirect.

Passing path=None keeps everything in memory (tests, throwaway sessions).
A corrupt or unreadable state file is treated as empty rather than fatal:
the worst case is that the user has to log in again.

Usage:
    storage = LocalStorage(Path("~/.recordkeeper/state.json").expanduser())
    storage.set_item(TOKEN_KEY, token)
    storage.get_item(TOKEN_KEY)      # returns str or None
    storage.remove_item(TOKEN_KEY)
"""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger("recordkeeper.client.storage")

TOKEN_KEY = "token"
USER_KEY = "user_data"
THEME_KEY = "theme"
REDIRECT_KEY = "auth_redirect"


class LocalStorage:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path).expanduser() if path is not None else None
        self._items: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if self.path is None or not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring state file %s: expected a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._items, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._save()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._save()

    def clear(self) -> None:
        self._items.clear()
        self._save()

    def __contains__(self, key: str) -> bool:
        return key in self._items
