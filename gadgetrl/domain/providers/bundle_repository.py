"""Abstract base class for bundle repositories."""

from abc import ABC, abstractmethod

from gadgetrl.domain.models.bundle import Bundle


class BundleRepository(ABC):
    """Looks up bundle definitions by id."""

    @abstractmethod
    def lookup(self, bundle_id: str) -> Bundle:
        """Return the bundle registered under ``bundle_id``.

        Raises:
            BundleNotFoundError: If no definition exists for the id
            MalformedBundleError: If the definition cannot be parsed
        """
        ...

    @abstractmethod
    def list_ids(self) -> list[str]:
        """Return all known bundle ids in definition order."""
        ...
