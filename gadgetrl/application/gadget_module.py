"""GadgetModule - loader-facing view of one gadget bundle.

Composes the bundle accessor, gating policy, content resolver and title-info
resolver. One instance serves one request; every memoized value (bundle,
gating decisions, freshness cache) lives on the instance and dies with it.

Gating information always comes from an explicit RequestContext. A missing
context, or one without a user, is treated as a maintenance run: the policy
still applies, it just has nobody to put into test mode.
"""

import logging
from collections.abc import Mapping

from gadgetrl.application.bundle_accessor import BundleAccessor
from gadgetrl.application.config_models import ResolverConfig
from gadgetrl.application.content_resolver import ContentResolver
from gadgetrl.application.freshness_cache import FreshnessCache
from gadgetrl.application.title_info_resolver import TitleInfoResolver
from gadgetrl.domain.constants import GROUP_SITE, GROUP_USER
from gadgetrl.domain.events.emitter import ModuleEventEmitter
from gadgetrl.domain.events.event_types import ModuleEventType
from gadgetrl.domain.gating_policy import GatingPolicy
from gadgetrl.domain.models.bundle import Bundle, BundleType, LoadType, PageRef, PageType
from gadgetrl.domain.models.gating import GatingMode
from gadgetrl.domain.models.request_context import RequestContext, UserRef
from gadgetrl.domain.models.revision import PageContent, VersionStamp
from gadgetrl.domain.providers.bundle_repository import BundleRepository
from gadgetrl.domain.providers.page_store import PageStore
from gadgetrl.domain.providers.review_service import ReviewService

logger = logging.getLogger(__name__)


class GadgetModule:
    """Resource loader module wrapping a single gadget bundle."""

    def __init__(
        self,
        bundle_id: str,
        *,
        repository: BundleRepository,
        page_store: PageStore,
        review_service: ReviewService | None = None,
        config: ResolverConfig | None = None,
        emitter: ModuleEventEmitter | None = None,
    ) -> None:
        config = config or ResolverConfig()
        self._id = bundle_id
        self._emitter = emitter or ModuleEventEmitter()
        self._accessor = BundleAccessor(repository, bundle_id)
        self._policy = GatingPolicy(review_service)
        self._modes: dict[UserRef | None, GatingMode] = {}
        self._content = ContentResolver(
            page_store,
            review_service,
            max_redirects=config.max_redirects,
            review_styles=config.review_styles,
        )
        self._title_info = TitleInfoResolver(
            page_store,
            review_service,
            cache=FreshnessCache(),
            review_styles=config.review_styles,
        )

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_placeholder(self) -> bool:
        """Whether the bundle could not be resolved and is empty."""
        self.get_bundle()
        return self._accessor.is_placeholder

    @property
    def freshness_cache(self) -> FreshnessCache:
        return self._title_info.cache

    # ========================================================================
    # Bundle projections
    # ========================================================================

    def get_bundle(self) -> Bundle:
        """Return the bundle this module is about (placeholder if unresolvable)."""
        first_lookup = not self._accessor.is_resolved
        bundle = self._accessor.get()
        if first_lookup:
            event_type = (
                ModuleEventType.BUNDLE_FALLBACK
                if self._accessor.is_placeholder
                else ModuleEventType.BUNDLE_RESOLVED
            )
            self._emitter.emit(event_type, self._id)
        return bundle

    def get_pages(self) -> dict[str, dict[str, str]]:
        """Pages composing this module, in load order.

        Styles always come first. Scripts are only listed when the bundle
        supports the resource loader; otherwise they are served elsewhere.
        """
        bundle = self.get_bundle()
        pages: dict[str, dict[str, str]] = {}

        for style in bundle.styles:
            pages[style] = {"type": PageType.STYLE.value}

        if bundle.supports_resource_loader:
            for script in bundle.scripts:
                pages[script] = {"type": PageType.SCRIPT.value}

        return pages

    def get_page_refs(self) -> list[PageRef]:
        return [
            PageRef(name=name, type=PageType(options["type"]))
            for name, options in self.get_pages().items()
        ]

    def get_dependencies(self) -> list[str]:
        return list(self.get_bundle().dependencies)

    def get_messages(self) -> list[str]:
        return list(self.get_bundle().messages)

    def get_targets(self) -> list[str]:
        return list(self.get_bundle().targets)

    def get_type(self) -> LoadType:
        if self.get_bundle().type == BundleType.STYLES:
            return LoadType.STYLES
        return LoadType.GENERAL

    # ========================================================================
    # Gated resolution
    # ========================================================================

    def get_gating_mode(self, context: RequestContext | None = None) -> GatingMode:
        """Gating mode for the context's user, decided once per user per instance."""
        user = context.user if context is not None else None
        mode = self._modes.get(user)
        if mode is None:
            mode = self._policy.decide(user)
            self._modes[user] = mode
            self._emitter.emit(ModuleEventType.GATING_DECIDED, self._id, mode=mode)
        return mode

    def get_group(self, context: RequestContext | None = None) -> str:
        """Cache group for the built module.

        Users who see unreviewed content while review is active get a
        per-user group so their build is never shared with other users.
        """
        if self._policy.review_installed and self.get_gating_mode(context) == GatingMode.UNREVIEWED:
            return GROUP_USER
        return GROUP_SITE

    def get_content_for(
        self,
        page: PageRef | str,
        context: RequestContext | None = None,
        *,
        max_redirects: int | None = None,
    ) -> PageContent | None:
        """Content to serve for one page of this module.

        Args:
            page: Page reference or bare page name
            context: Request context carrying the user, if any
            max_redirects: Override for the unreviewed redirect hop limit

        Returns:
            PageContent, or None when the page has no content under the mode
        """
        ref = page if isinstance(page, PageRef) else self._page_ref(page)
        mode = self.get_gating_mode(context)
        content = self._content.resolve(ref, mode, max_redirects=max_redirects)
        self._emitter.emit(
            ModuleEventType.CONTENT_RESOLVED,
            self._id,
            mode=mode,
            page=ref.name,
            metadata={"found": content is not None},
        )
        return content

    def get_freshness_info(self, context: RequestContext | None = None) -> Mapping[str, VersionStamp]:
        """Read-only version stamps for every page of this module.

        Raises:
            BackingStoreError: If the page store or review service fails
        """
        refs = self.get_page_refs()
        mode = self.get_gating_mode(context)
        key = self._title_info.key_for(refs)

        if self._title_info.is_cached(refs):
            self._emitter.emit(ModuleEventType.TITLE_INFO_CACHE_HIT, self._id, mode=mode, batch_key=key)
            return self._title_info.resolve(refs, mode)

        try:
            info = self._title_info.resolve(refs, mode)
        except Exception as e:
            logger.warning(f"Title info lookup failed for module '{self._id}': {e}")
            self._emitter.emit(
                ModuleEventType.TITLE_INFO_FAILED,
                self._id,
                mode=mode,
                batch_key=key,
                metadata={"error": str(e)},
            )
            raise

        self._emitter.emit(
            ModuleEventType.TITLE_INFO_LOADED,
            self._id,
            mode=mode,
            batch_key=key,
            metadata={"pages": len(info)},
        )
        return info

    get_title_info = get_freshness_info

    def _page_ref(self, page_name: str) -> PageRef:
        # Bundle membership decides the kind; unknown names fall back to the suffix.
        options = self.get_pages().get(page_name)
        if options is None:
            return PageRef.from_name(page_name)
        return PageRef(name=page_name, type=PageType(options["type"]))
