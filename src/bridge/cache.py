"""Lock-guarded identity caches shared by concurrent webhook deliveries."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

from src.models import LocalIdentity

V = TypeVar("V")


class IdentityCache(Generic[V]):
    """Process-lifetime mapping populated lazily on first lookup.

    Entries are never invalidated or refreshed. Two concurrent misses for the
    same key may both fetch; the later ``put`` wins.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._entries: dict[str, V] = {}

    def get(self, key: str) -> V | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class BridgeCaches:
    """The four caches owned by one bridge instance."""

    def __init__(self) -> None:
        self.slack_user_names: IdentityCache[str] = IdentityCache("slack_user_names")
        self.slack_channel_names: IdentityCache[str] = IdentityCache("slack_channel_names")
        self.mattermost_users: IdentityCache[LocalIdentity] = IdentityCache("mattermost_users")
        self.mattermost_channels: IdentityCache[LocalIdentity] = IdentityCache(
            "mattermost_channels",
        )

    def clear(self) -> None:
        for cache in (
            self.slack_user_names,
            self.slack_channel_names,
            self.mattermost_users,
            self.mattermost_channels,
        ):
            cache.clear()
