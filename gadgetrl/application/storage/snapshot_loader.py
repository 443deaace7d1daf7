"""YAML site snapshot feeding the in-memory collaborators.

Snapshot structure:
    bundles:
      foo:
        styles: [Gadget-foo.css]
        scripts: [Gadget-foo.js]
        resource_loader: true
        dependencies: [mediawiki.util]
    pages:
      Gadget-foo.js:
        - text: "console.log(1);"
        - text: "console.log(2);"
      Gadget-old.js:
        - redirect: Gadget-foo.js
    review:
      installed: true
      approved:
        Gadget-foo.js: 1      # 1-based index into the page's revisions
      test_mode_users: [42]

Bundle definitions are kept raw so one malformed bundle does not prevent the
rest of the snapshot from loading.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gadgetrl.application.config_loader import ConfigLoadError, load_yaml_mapping
from gadgetrl.application.storage.memory_backends import (
    InMemoryBundleRepository,
    InMemoryPageStore,
    InMemoryReviewService,
)


class RevisionSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = ""
    redirect: str | None = None
    timestamp: datetime | None = None


class ReviewSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    installed: bool = False
    approved: dict[str, int] = Field(default_factory=dict)
    test_mode_users: list[int] = Field(default_factory=list)

    @field_validator("approved")
    @classmethod
    def _indexes_ge_1(cls, v: dict[str, int]) -> dict[str, int]:
        bad = sorted(name for name, index in v.items() if index < 1)
        if bad:
            raise ValueError(f"approved revision index must be >= 1: {bad}")
        return v


class SiteSnapshot(BaseModel):
    """Parsed snapshot file."""

    model_config = ConfigDict(extra="forbid")

    bundles: dict[str, Any] = Field(default_factory=dict)
    pages: dict[str, list[RevisionSpec]] = Field(default_factory=dict)
    review: ReviewSpec = Field(default_factory=ReviewSpec)


@dataclass
class SiteBackends:
    """Collaborators built from a snapshot."""

    repository: InMemoryBundleRepository
    page_store: InMemoryPageStore
    review_service: InMemoryReviewService


def build_backends(snapshot: SiteSnapshot) -> SiteBackends:
    """Instantiate in-memory collaborators populated from ``snapshot``.

    Raises:
        ValueError: If an approved index points past a page's revisions
    """
    page_store = InMemoryPageStore()
    revision_ids: dict[str, list[int]] = {}
    for name, revisions in snapshot.pages.items():
        revision_ids[name] = [
            page_store.add_revision(
                name,
                spec.text,
                redirect_target=spec.redirect,
                timestamp=spec.timestamp,
            )
            for spec in revisions
        ]

    review_service = InMemoryReviewService(page_store, installed=snapshot.review.installed)
    for name, index in snapshot.review.approved.items():
        ids = revision_ids.get(name, [])
        if index > len(ids):
            raise ValueError(f"Page '{name}' has no revision #{index} to approve")
        review_service.approve(name, ids[index - 1])
    for user_id in snapshot.review.test_mode_users:
        review_service.set_test_mode(user_id)

    return SiteBackends(
        repository=InMemoryBundleRepository(snapshot.bundles),
        page_store=page_store,
        review_service=review_service,
    )


def load_snapshot(path: Path) -> SiteSnapshot:
    """Load and validate a snapshot file.

    Raises:
        FileNotFoundError: If the snapshot does not exist
        ConfigLoadError: If the YAML is malformed or fails validation
    """
    if not path.exists():
        raise FileNotFoundError(f"Snapshot not found: {path}")

    data = load_yaml_mapping(path)
    try:
        return SiteSnapshot.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError("Invalid snapshot", path=path, cause=e) from e
