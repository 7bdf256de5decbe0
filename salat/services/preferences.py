"""Key-value persistence for user preferences.

The store is a narrow collaborator: anything with ``get``/``set``/``remove``
works. ``InMemoryStore`` backs tests and the dev server; ``JsonFileStore``
keeps one JSON document on disk.
"""

from __future__ import annotations

import json
import os
import threading
import time
from typing import Any, Dict, Optional, Protocol

from .methods import DEFAULT_METHOD
from .reminders import NotificationSettings

KEYS = {
    "user_location": "user_location",
    "notification_settings": "notification_settings",
    "prayer_method": "prayer_method",
    "app_settings": "app_settings",
    "last_prayer_times": "last_prayer_times",
}

DEFAULT_APP_SETTINGS: Dict[str, Any] = {
    "theme": "light",
    "language": "en",
    "is_24_hour_format": False,
    "auto_location": True,
}


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            raw = self._data.get(key)
        return json.loads(raw) if raw is not None else default

    def set(self, key: str, value: Any) -> None:
        # stored serialised so callers never share mutable state with the store
        raw = json.dumps(value)
        with self._lock:
            self._data[key] = raw

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileStore:
    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, data: Dict[str, Any]) -> None:
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)


class Preferences:
    """Typed accessors over a :class:`KeyValueStore` with merged defaults."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def save_user_location(self, latitude: float, longitude: float, name: Optional[str] = None) -> None:
        self.store.set(
            KEYS["user_location"],
            {"latitude": latitude, "longitude": longitude, "name": name, "timestamp": time.time()},
        )

    def user_location(self) -> Optional[Dict[str, Any]]:
        return self.store.get(KEYS["user_location"])

    def save_notification_settings(self, settings: NotificationSettings) -> None:
        self.store.set(KEYS["notification_settings"], settings.to_dict())

    def notification_settings(self) -> NotificationSettings:
        return NotificationSettings.from_dict(self.store.get(KEYS["notification_settings"]))

    def save_prayer_method(self, method: str) -> None:
        self.store.set(KEYS["prayer_method"], method)

    def prayer_method(self) -> str:
        return self.store.get(KEYS["prayer_method"], os.getenv("DEFAULT_METHOD", DEFAULT_METHOD))

    def save_app_settings(self, settings: Dict[str, Any]) -> None:
        self.store.set(KEYS["app_settings"], {**DEFAULT_APP_SETTINGS, **settings})

    def app_settings(self) -> Dict[str, Any]:
        return {**DEFAULT_APP_SETTINGS, **(self.store.get(KEYS["app_settings"]) or {})}

    def save_last_prayer_times(self, payload: Dict[str, Any]) -> None:
        self.store.set(KEYS["last_prayer_times"], payload)

    def last_prayer_times(self) -> Optional[Dict[str, Any]]:
        return self.store.get(KEYS["last_prayer_times"])
