"""BundleAccessor - resolves a module's bundle once, never failing."""

import logging

from gadgetrl.domain.errors import BackingStoreError, BundleLookupError
from gadgetrl.domain.models.bundle import Bundle
from gadgetrl.domain.providers.bundle_repository import BundleRepository

logger = logging.getLogger(__name__)


class BundleAccessor:
    """Memoized bundle lookup for one module instance.

    A bundle that cannot be resolved is replaced by an empty placeholder so
    sibling modules listed in the same pass keep working.
    """

    def __init__(self, repository: BundleRepository, bundle_id: str) -> None:
        self._repository = repository
        self._bundle_id = bundle_id
        self._bundle: Bundle | None = None
        self._fell_back = False

    @property
    def bundle_id(self) -> str:
        return self._bundle_id

    @property
    def is_resolved(self) -> bool:
        return self._bundle is not None

    @property
    def is_placeholder(self) -> bool:
        """True once the lookup has failed and the placeholder is in use."""
        return self._fell_back

    def get(self) -> Bundle:
        if self._bundle is None:
            self._bundle = self._lookup()
        return self._bundle

    def _lookup(self) -> Bundle:
        # ValueError covers pydantic validation of a malformed definition.
        try:
            return self._repository.lookup(self._bundle_id)
        except (BundleLookupError, BackingStoreError, ValueError) as e:
            logger.warning(f"Using placeholder for bundle '{self._bundle_id}': {e}")
            self._fell_back = True
            return Bundle.placeholder(self._bundle_id)
