"""In-memory collaborators for development, tests and the inspection CLI.

The page store keeps every revision of every page; the review service pins
approved revisions by id and reads their content back from the page store.
Both can be switched to ``unavailable`` to simulate a backing store outage.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gadgetrl.domain.errors import (
    BackingStoreError,
    BundleNotFoundError,
    MalformedBundleError,
)
from gadgetrl.domain.models.bundle import Bundle, BundleDefinition
from gadgetrl.domain.models.revision import PageContent, TitleInfo, VersionStamp
from gadgetrl.domain.providers.bundle_repository import BundleRepository
from gadgetrl.domain.providers.page_store import PageStore
from gadgetrl.domain.providers.review_service import ReviewService


class StoredRevision(BaseModel):
    """One saved revision of a page."""

    model_config = ConfigDict(frozen=True)

    revision_id: int
    page_name: str
    text: str
    redirect_target: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_content(self) -> PageContent:
        return PageContent(
            page_name=self.page_name,
            revision_id=self.revision_id,
            text=self.text,
            redirect_target=self.redirect_target,
        )

    def to_stamp(self, page_id: int) -> VersionStamp:
        return VersionStamp(
            page_id=page_id,
            revision_id=self.revision_id,
            length=len(self.text.encode("utf-8")),
            touched=self.timestamp,
        )


class InMemoryBundleRepository(BundleRepository):
    """Bundle repository over a dict of bundles or raw definition mappings.

    Raw mappings are validated on lookup, so a malformed entry only breaks
    its own bundle.
    """

    def __init__(self, definitions: Mapping[str, Bundle | Mapping[str, Any]] | None = None) -> None:
        self._definitions: dict[str, Bundle | Mapping[str, Any]] = dict(definitions or {})

    def add(self, bundle: Bundle) -> None:
        self._definitions[bundle.id] = bundle

    def lookup(self, bundle_id: str) -> Bundle:
        if bundle_id not in self._definitions:
            raise BundleNotFoundError(bundle_id)

        definition = self._definitions[bundle_id]
        if isinstance(definition, Bundle):
            return definition

        try:
            return BundleDefinition.model_validate(dict(definition)).to_bundle(bundle_id)
        except (ValueError, TypeError) as e:
            raise MalformedBundleError(bundle_id, f"Invalid definition for bundle '{bundle_id}': {e}") from e

    def list_ids(self) -> list[str]:
        return list(self._definitions)


class InMemoryPageStore(PageStore):
    """Page store keeping full revision history in memory."""

    def __init__(self) -> None:
        self._history: dict[str, list[StoredRevision]] = {}
        self._page_ids: dict[str, int] = {}
        self._revisions: dict[int, StoredRevision] = {}
        self._next_revision_id = 1
        self.unavailable = False

    def add_revision(
        self,
        page_name: str,
        text: str = "",
        *,
        redirect_target: str | None = None,
        timestamp: datetime | None = None,
    ) -> int:
        """Save a new revision and return its id."""
        fields: dict[str, Any] = {
            "revision_id": self._next_revision_id,
            "page_name": page_name,
            "text": text,
            "redirect_target": redirect_target,
        }
        if timestamp is not None:
            fields["timestamp"] = timestamp
        revision = StoredRevision(**fields)

        self._next_revision_id += 1
        self._page_ids.setdefault(page_name, len(self._page_ids) + 1)
        self._history.setdefault(page_name, []).append(revision)
        self._revisions[revision.revision_id] = revision
        return revision.revision_id

    def history(self, page_name: str) -> list[StoredRevision]:
        return list(self._history.get(page_name, []))

    def get_revision(self, revision_id: int) -> StoredRevision | None:
        self._check_available()
        return self._revisions.get(revision_id)

    def page_id(self, page_name: str) -> int | None:
        return self._page_ids.get(page_name)

    def latest_content(self, page_name: str) -> PageContent | None:
        self._check_available()
        revisions = self._history.get(page_name)
        if not revisions:
            return None
        return revisions[-1].to_content()

    def latest_version_stamps(self, page_names: Iterable[str]) -> TitleInfo:
        self._check_available()
        info: TitleInfo = {}
        for name in page_names:
            revisions = self._history.get(name)
            if revisions:
                info[name] = revisions[-1].to_stamp(self._page_ids[name])
        return info

    def _check_available(self) -> None:
        if self.unavailable:
            raise BackingStoreError("Page store unavailable", store="memory")


class InMemoryReviewService(ReviewService):
    """Review service pinning approved revision ids per page."""

    def __init__(self, page_store: InMemoryPageStore, *, installed: bool = True) -> None:
        self._page_store = page_store
        self._installed = installed
        self._approved: dict[str, int] = {}
        self._test_mode_users: set[int] = set()
        self.unavailable = False

    def approve(self, page_name: str, revision_id: int | None = None) -> int:
        """Mark a revision approved; defaults to the page's latest revision.

        Raises:
            KeyError: If the page or revision does not exist
        """
        history = self._page_store.history(page_name)
        if not history:
            raise KeyError(f"Page '{page_name}' has no revisions")

        if revision_id is None:
            revision_id = history[-1].revision_id
        elif revision_id not in {r.revision_id for r in history}:
            raise KeyError(f"Revision {revision_id} does not belong to '{page_name}'")

        self._approved[page_name] = revision_id
        return revision_id

    def set_test_mode(self, user_id: int, enabled: bool = True) -> None:
        if enabled:
            self._test_mode_users.add(user_id)
        else:
            self._test_mode_users.discard(user_id)

    def is_installed(self) -> bool:
        return self._installed

    def is_user_in_test_mode(self, user_id: int) -> bool:
        self._check_available()
        return user_id in self._test_mode_users

    def approved_content(self, page_name: str) -> PageContent | None:
        revision = self._approved_revision(page_name)
        return revision.to_content() if revision is not None else None

    def approved_version_stamps(self, page_names: Iterable[str]) -> TitleInfo:
        self._check_available()
        info: TitleInfo = {}
        for name in page_names:
            revision = self._approved_revision(name)
            page_id = self._page_store.page_id(name)
            if revision is not None and page_id is not None:
                info[name] = revision.to_stamp(page_id)
        return info

    def _approved_revision(self, page_name: str) -> StoredRevision | None:
        self._check_available()
        revision_id = self._approved.get(page_name)
        if revision_id is None:
            return None
        return self._page_store.get_revision(revision_id)

    def _check_available(self) -> None:
        if self.unavailable:
            raise BackingStoreError("Review service unavailable", store="memory")
