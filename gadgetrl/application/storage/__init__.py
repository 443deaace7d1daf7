"""In-memory collaborators and site snapshot loading."""

from .memory_backends import (
    InMemoryBundleRepository,
    InMemoryPageStore,
    InMemoryReviewService,
    StoredRevision,
)
from .snapshot_loader import SiteBackends, SiteSnapshot, build_backends, load_snapshot

__all__ = [
    "InMemoryBundleRepository",
    "InMemoryPageStore",
    "InMemoryReviewService",
    "StoredRevision",
    "SiteBackends",
    "SiteSnapshot",
    "build_backends",
    "load_snapshot",
]
