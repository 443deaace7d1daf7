"""Domain models for gadget module resolution."""

from .bundle import (
    Bundle,
    BundleDefinition,
    BundleType,
    LoadType,
    PageRef,
    PageType,
)
from .gating import GatingMode
from .request_context import RequestContext, UserRef
from .revision import PageContent, TitleInfo, VersionStamp


__all__ = [
    "Bundle",
    "BundleDefinition",
    "BundleType",
    "LoadType",
    "PageRef",
    "PageType",
    "GatingMode",
    "RequestContext",
    "UserRef",
    "PageContent",
    "TitleInfo",
    "VersionStamp",
]
