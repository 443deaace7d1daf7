from .bundle_repository import BundleRepository
from .page_store import PageStore
from .review_service import ReviewService

__all__ = ["BundleRepository", "PageStore", "ReviewService"]
