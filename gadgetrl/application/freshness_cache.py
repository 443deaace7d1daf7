"""Per-module cache of page version stamps, keyed by batch."""

from collections.abc import Iterable, Mapping

from gadgetrl.domain.constants import BATCH_KEY_SEPARATOR
from gadgetrl.domain.models.revision import VersionStamp


def batch_key(page_names: Iterable[str]) -> str:
    """Canonical cache key for a set of pages: sorted, deduplicated, pipe-joined."""
    return BATCH_KEY_SEPARATOR.join(sorted(set(page_names)))


class FreshnessCache:
    """Title info memoized per batch key.

    Lives as long as the module instance that owns it. Entries are never
    invalidated; a new request builds a new module and therefore a new cache.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Mapping[str, VersionStamp]] = {}

    def get(self, key: str) -> Mapping[str, VersionStamp] | None:
        return self._entries.get(key)

    def put(self, key: str, info: Mapping[str, VersionStamp]) -> None:
        self._entries[key] = info

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
