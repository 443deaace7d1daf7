"""TitleInfoResolver - version stamps used by the loader for freshness checks.

Results are memoized per batch key in a FreshnessCache. A backing store failure
propagates and leaves the cache untouched, so a later call retries the whole
batch instead of trusting a partial result.
"""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from gadgetrl.application.freshness_cache import FreshnessCache, batch_key
from gadgetrl.domain.models.bundle import PageRef, PageType
from gadgetrl.domain.models.gating import GatingMode
from gadgetrl.domain.models.revision import TitleInfo, VersionStamp
from gadgetrl.domain.providers.page_store import PageStore
from gadgetrl.domain.providers.review_service import ReviewService

logger = logging.getLogger(__name__)


def _as_page_refs(pages: Iterable[PageRef | str]) -> list[PageRef]:
    refs: dict[str, PageRef] = {}
    for page in pages:
        ref = page if isinstance(page, PageRef) else PageRef.from_name(page)
        refs.setdefault(ref.name, ref)
    return list(refs.values())


class TitleInfoResolver:
    """Loads and caches version stamps for batches of pages."""

    def __init__(
        self,
        page_store: PageStore,
        review_service: ReviewService | None = None,
        *,
        cache: FreshnessCache | None = None,
        review_styles: bool = False,
    ) -> None:
        self._page_store = page_store
        self._review_service = review_service
        self._cache = cache if cache is not None else FreshnessCache()
        self._review_styles = review_styles

    @property
    def cache(self) -> FreshnessCache:
        return self._cache

    def is_cached(self, pages: Iterable[PageRef | str]) -> bool:
        return self.key_for(pages) in self._cache

    def key_for(self, pages: Iterable[PageRef | str]) -> str:
        return batch_key(ref.name for ref in _as_page_refs(pages))

    def resolve(self, pages: Iterable[PageRef | str], mode: GatingMode) -> Mapping[str, VersionStamp]:
        """Return a read-only page name -> version stamp mapping for ``pages``.

        Args:
            pages: Page references, or bare names (kind inferred from suffix)
            mode: Gating mode for this request

        Returns:
            Mapping of page name to stamp; pages without content are absent

        Raises:
            BackingStoreError: If the page store or review service fails
        """
        refs = _as_page_refs(pages)
        key = batch_key(ref.name for ref in refs)

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Title info cache hit for [{key}]")
            return cached

        # Read-only: every cache hit returns this same mapping.
        info = MappingProxyType(self._load(refs, mode))
        self._cache.put(key, info)
        logger.debug(f"Loaded title info for [{key}] ({mode.value}): {len(info)} of {len(refs)} pages")
        return info

    def _load(self, refs: list[PageRef], mode: GatingMode) -> TitleInfo:
        if mode == GatingMode.UNREVIEWED or self._review_service is None:
            return self._page_store.latest_version_stamps([ref.name for ref in refs])

        gated = [ref.name for ref in refs if ref.type == PageType.SCRIPT or self._review_styles]
        ungated = [ref.name for ref in refs if ref.name not in gated]

        info: TitleInfo = {}
        if gated:
            info.update(self._review_service.approved_version_stamps(gated))
        if ungated:
            info.update(self._page_store.latest_version_stamps(ungated))
        return info
