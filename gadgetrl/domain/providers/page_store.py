"""Abstract base class for page stores."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from gadgetrl.domain.models.revision import PageContent, TitleInfo


class PageStore(ABC):
    """Source of stored page revisions, regardless of review state.

    Implementations raise BackingStoreError when the store cannot be reached.
    """

    @abstractmethod
    def latest_content(self, page_name: str) -> PageContent | None:
        """Return the latest stored revision of a page.

        Redirects are not followed here; a redirect revision is returned as-is
        with ``redirect_target`` set.

        Returns:
            PageContent, or None if the page does not exist
        """
        ...

    @abstractmethod
    def latest_version_stamps(self, page_names: Iterable[str]) -> TitleInfo:
        """Bulk lookup of the latest revision metadata per page.

        Pages that do not exist are omitted from the result.
        """
        ...
