"""ContentResolver - picks which revision of a page is served.

Unreviewed content is the latest stored revision, with redirects followed.
Reviewed content is the pinned approved revision; redirects are meaningless
for a pinned revision and are not followed.
"""

import logging

from gadgetrl.domain.constants import DEFAULT_MAX_REDIRECTS
from gadgetrl.domain.models.bundle import PageRef, PageType
from gadgetrl.domain.models.gating import GatingMode
from gadgetrl.domain.models.revision import PageContent
from gadgetrl.domain.providers.page_store import PageStore
from gadgetrl.domain.providers.review_service import ReviewService

logger = logging.getLogger(__name__)


class ContentResolver:
    """Resolves the content of a single page under a gating mode."""

    def __init__(
        self,
        page_store: PageStore,
        review_service: ReviewService | None = None,
        *,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        review_styles: bool = False,
    ) -> None:
        self._page_store = page_store
        self._review_service = review_service
        self._max_redirects = max_redirects
        self._review_styles = review_styles

    def is_gated(self, page: PageRef, mode: GatingMode) -> bool:
        """Whether ``page`` goes through the review service under ``mode``."""
        if mode != GatingMode.REVIEWED or self._review_service is None:
            return False
        return page.type == PageType.SCRIPT or self._review_styles

    def resolve(
        self,
        page: PageRef,
        mode: GatingMode,
        *,
        max_redirects: int | None = None,
    ) -> PageContent | None:
        """Return the content to serve for ``page``, or None if it has none.

        Args:
            page: Page to resolve
            mode: Gating mode for this request
            max_redirects: Override for the unreviewed redirect hop limit
        """
        service = self._review_service
        if service is not None and self.is_gated(page, mode):
            content = service.approved_content(page.name)
            if content is None:
                logger.debug(f"No approved revision for {page.name}")
            return content

        hops = self._max_redirects if max_redirects is None else max_redirects
        return self._latest_following_redirects(page.name, hops)

    def _latest_following_redirects(self, page_name: str, max_redirects: int) -> PageContent | None:
        content = self._page_store.latest_content(page_name)
        seen = {page_name}

        for _ in range(max_redirects):
            if content is None or content.redirect_target is None:
                break
            target = content.redirect_target
            if target in seen:
                logger.warning(f"Redirect loop at {page_name} -> {target}")
                break
            seen.add(target)
            logger.debug(f"Following redirect {content.page_name} -> {target}")
            content = self._page_store.latest_content(target)

        if content is None:
            logger.debug(f"No stored content for {page_name}")
        return content
