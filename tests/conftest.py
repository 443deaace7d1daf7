from pathlib import Path
from typing import Any, Callable

import pytest

from gadgetrl.application.gadget_module import GadgetModule
from gadgetrl.application.storage import (
    InMemoryBundleRepository,
    InMemoryPageStore,
    InMemoryReviewService,
)
from gadgetrl.domain.models.bundle import Bundle
from gadgetrl.domain.models.request_context import RequestContext, UserRef


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep developer ~/.gadgetrl/config.yml out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    return home


@pytest.fixture
def page_store() -> InMemoryPageStore:
    """Page store with one gadget's script and style plus a redirect."""
    store = InMemoryPageStore()
    store.add_revision("Gadget-foo.js", "mw.log('v1');")
    store.add_revision("Gadget-foo.css", ".foo { color: red; }")
    store.add_revision("Gadget-foo.js", "mw.log('v2');")
    return store


@pytest.fixture
def review_service(page_store: InMemoryPageStore) -> InMemoryReviewService:
    """Installed review service with the first script revision approved."""
    service = InMemoryReviewService(page_store, installed=True)
    first = page_store.history("Gadget-foo.js")[0].revision_id
    service.approve("Gadget-foo.js", first)
    service.set_test_mode(42)
    return service


@pytest.fixture
def foo_bundle() -> Bundle:
    return Bundle(
        id="foo",
        styles=("Gadget-foo.css",),
        scripts=("Gadget-foo.js",),
        supports_resource_loader=True,
        dependencies=("mediawiki.util",),
        targets=("desktop", "mobile"),
        messages=("foo-label",),
    )


@pytest.fixture
def repository(foo_bundle: Bundle) -> InMemoryBundleRepository:
    return InMemoryBundleRepository({"foo": foo_bundle})


@pytest.fixture
def make_module(
    repository: InMemoryBundleRepository,
    page_store: InMemoryPageStore,
    review_service: InMemoryReviewService,
) -> Callable[..., GadgetModule]:
    """Factory building a fresh module per call, as one request would."""

    def _make(bundle_id: str = "foo", **overrides: Any) -> GadgetModule:
        kwargs: dict[str, Any] = {
            "repository": repository,
            "page_store": page_store,
            "review_service": review_service,
        }
        kwargs.update(overrides)
        return GadgetModule(bundle_id, **kwargs)

    return _make


@pytest.fixture
def tester_context() -> RequestContext:
    """Logged-in user 42, who is in review test mode."""
    return RequestContext(user=UserRef(user_id=42, logged_in=True))


@pytest.fixture
def reader_context() -> RequestContext:
    """Logged-in user 7, not in test mode."""
    return RequestContext(user=UserRef(user_id=7, logged_in=True))
