"""Abstract base class for the content review service."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from gadgetrl.domain.models.revision import PageContent, TitleInfo


class ReviewService(ABC):
    """Review service that approves script revisions before they are served.

    The service is optional per deployment; ``is_installed`` reports whether it
    is active for the current site.
    """

    @abstractmethod
    def is_installed(self) -> bool:
        """Whether review gating is active for this site."""
        ...

    @abstractmethod
    def is_user_in_test_mode(self, user_id: int) -> bool:
        """Whether the user has opted into previewing unreviewed content."""
        ...

    @abstractmethod
    def approved_content(self, page_name: str) -> PageContent | None:
        """Return the latest approved revision of a page.

        Returns:
            PageContent of the pinned revision, or None if nothing is approved
        """
        ...

    @abstractmethod
    def approved_version_stamps(self, page_names: Iterable[str]) -> TitleInfo:
        """Bulk lookup of the latest approved revision metadata per page.

        Pages without an approved revision are omitted from the result.
        """
        ...
