"""Module resolution event types for observer notifications."""

from enum import Enum


class ModuleEventType(str, Enum):
    """Typed events raised while a gadget module is resolved."""

    # Bundle lookup
    BUNDLE_RESOLVED = "bundle_resolved"
    BUNDLE_FALLBACK = "bundle_fallback"

    # Gating
    GATING_DECIDED = "gating_decided"

    # Freshness
    TITLE_INFO_CACHE_HIT = "title_info_cache_hit"
    TITLE_INFO_LOADED = "title_info_loaded"
    TITLE_INFO_FAILED = "title_info_failed"

    # Content
    CONTENT_RESOLVED = "content_resolved"
