"""Tests for GadgetModule, the loader-facing module view."""

from unittest.mock import MagicMock, Mock

import pytest

from gadgetrl.application.config_models import ResolverConfig
from gadgetrl.application.gadget_module import GadgetModule
from gadgetrl.application.storage import (
    InMemoryBundleRepository,
    InMemoryPageStore,
    InMemoryReviewService,
)
from gadgetrl.domain.constants import GROUP_SITE, GROUP_USER
from gadgetrl.domain.errors import BackingStoreError
from gadgetrl.domain.events import ModuleEventEmitter, ModuleEventType
from gadgetrl.domain.models.bundle import Bundle, BundleType, LoadType, PageRef, PageType
from gadgetrl.domain.models.gating import GatingMode
from gadgetrl.domain.models.request_context import RequestContext, UserRef
from gadgetrl.domain.providers.bundle_repository import BundleRepository


class TestPages:
    def test_styles_and_scripts_with_resource_loader(self) -> None:
        repo = InMemoryBundleRepository(
            {"foo": Bundle(id="foo", scripts=("a.js",), styles=("a.css",), supports_resource_loader=True)}
        )
        module = GadgetModule("foo", repository=repo, page_store=InMemoryPageStore())

        assert module.get_pages() == {"a.css": {"type": "style"}, "a.js": {"type": "script"}}
        assert list(module.get_pages()) == ["a.css", "a.js"]

    def test_scripts_dropped_without_resource_loader(self) -> None:
        repo = InMemoryBundleRepository(
            {"foo": Bundle(id="foo", scripts=("a.js",), styles=("a.css",), supports_resource_loader=False)}
        )
        module = GadgetModule("foo", repository=repo, page_store=InMemoryPageStore())

        assert module.get_pages() == {"a.css": {"type": "style"}}

    def test_page_order_follows_definition(self) -> None:
        bundle = Bundle(
            id="foo",
            styles=("z.css", "a.css"),
            scripts=("m.js", "b.js"),
            supports_resource_loader=True,
        )
        module = GadgetModule("foo", repository=InMemoryBundleRepository({"foo": bundle}), page_store=InMemoryPageStore())

        assert list(module.get_pages()) == ["z.css", "a.css", "m.js", "b.js"]

    def test_page_refs_carry_kind(self, make_module) -> None:
        assert make_module().get_page_refs() == [
            PageRef(name="Gadget-foo.css", type=PageType.STYLE),
            PageRef(name="Gadget-foo.js", type=PageType.SCRIPT),
        ]


class TestProjections:
    def test_pass_through_metadata(self, make_module) -> None:
        module = make_module()

        assert module.get_dependencies() == ["mediawiki.util"]
        assert module.get_targets() == ["desktop", "mobile"]
        assert module.get_messages() == ["foo-label"]
        assert module.get_type() == LoadType.GENERAL

    def test_styles_type_tag(self) -> None:
        repo = InMemoryBundleRepository({"s": Bundle(id="s", styles=("s.css",), type=BundleType.STYLES)})
        assert GadgetModule("s", repository=repo, page_store=InMemoryPageStore()).get_type() == LoadType.STYLES

    def test_unknown_bundle_degrades_to_empty_module(self, make_module) -> None:
        module = make_module("ghost")

        assert module.get_pages() == {}
        assert module.get_dependencies() == []
        assert module.get_targets() == []
        assert module.get_messages() == []
        assert module.get_type() == LoadType.GENERAL
        assert module.is_placeholder

    def test_bundle_looked_up_once_per_instance(self, foo_bundle, page_store) -> None:
        repo = Mock(spec=BundleRepository)
        repo.lookup.return_value = foo_bundle
        module = GadgetModule("foo", repository=repo, page_store=page_store)

        module.get_pages()
        module.get_dependencies()
        module.get_messages()
        assert module.get_bundle() is module.get_bundle()

        repo.lookup.assert_called_once_with("foo")

    def test_instances_do_not_share_bundles(self, foo_bundle, page_store) -> None:
        repo = Mock(spec=BundleRepository)
        repo.lookup.return_value = foo_bundle

        GadgetModule("foo", repository=repo, page_store=page_store).get_bundle()
        GadgetModule("foo", repository=repo, page_store=page_store).get_bundle()

        assert repo.lookup.call_count == 2

    @pytest.mark.parametrize("bundle_id", ["", " foo "])
    def test_unusual_ids_degrade_to_empty_module(self, bundle_id: str) -> None:
        module = GadgetModule(bundle_id, repository=InMemoryBundleRepository(), page_store=InMemoryPageStore())

        assert module.get_pages() == {}
        assert module.get_dependencies() == []
        assert module.get_bundle().id == bundle_id
        assert module.is_placeholder


class TestGatingMode:
    def test_decided_once_per_user(self, repository, page_store, tester_context) -> None:
        review = MagicMock(spec=InMemoryReviewService)
        review.is_installed.return_value = True
        review.is_user_in_test_mode.return_value = True
        review.approved_content.return_value = None
        emitter = ModuleEventEmitter()
        observer = MagicMock()
        emitter.subscribe(observer, event_types=[ModuleEventType.GATING_DECIDED])
        module = GadgetModule(
            "foo", repository=repository, page_store=page_store, review_service=review, emitter=emitter
        )

        assert module.get_gating_mode(tester_context) == GatingMode.UNREVIEWED
        module.get_group(tester_context)
        module.get_content_for("Gadget-foo.js", tester_context)

        review.is_user_in_test_mode.assert_called_once_with(42)
        observer.on_event.assert_called_once()

    def test_each_user_gets_its_own_decision(self, make_module, tester_context, reader_context) -> None:
        module = make_module()

        assert module.get_gating_mode(tester_context) == GatingMode.UNREVIEWED
        assert module.get_gating_mode(reader_context) == GatingMode.REVIEWED
        assert module.get_gating_mode(None) == GatingMode.REVIEWED


class TestGroup:
    def test_site_group_without_review_service(self, repository, page_store, tester_context) -> None:
        module = GadgetModule("foo", repository=repository, page_store=page_store)

        assert module.get_group(tester_context) == GROUP_SITE
        assert module.get_group(None) == GROUP_SITE

    def test_site_group_when_review_not_installed(self, repository, page_store, tester_context) -> None:
        review = InMemoryReviewService(page_store, installed=False)
        review.set_test_mode(42)
        module = GadgetModule("foo", repository=repository, page_store=page_store, review_service=review)

        assert module.get_group(tester_context) == GROUP_SITE

    def test_user_group_for_test_mode_user(self, make_module, tester_context) -> None:
        assert make_module().get_group(tester_context) == GROUP_USER

    def test_site_group_for_regular_user(self, make_module, reader_context) -> None:
        assert make_module().get_group(reader_context) == GROUP_SITE

    def test_site_group_without_user(self, make_module) -> None:
        assert make_module().get_group(RequestContext()) == GROUP_SITE


class TestContent:
    def test_reviewed_user_gets_approved_script(self, make_module, reader_context) -> None:
        content = make_module().get_content_for("Gadget-foo.js", reader_context)

        assert content is not None
        assert content.text == "mw.log('v1');"

    def test_test_mode_user_gets_latest_script(self, make_module, tester_context) -> None:
        content = make_module().get_content_for("Gadget-foo.js", tester_context)

        assert content is not None
        assert content.text == "mw.log('v2');"

    def test_no_context_uses_reviewed_content(self, make_module) -> None:
        content = make_module().get_content_for("Gadget-foo.js")

        assert content is not None
        assert content.text == "mw.log('v1');"

    def test_missing_page_is_none(self, make_module, tester_context) -> None:
        assert make_module().get_content_for("Gadget-missing.js", tester_context) is None

    def test_unreviewed_follows_redirect_but_reviewed_does_not(self, repository) -> None:
        store = InMemoryPageStore()
        store.add_revision("Gadget-target.js", "target();")
        store.add_revision("Gadget-foo.js", "", redirect_target="Gadget-target.js")
        review = InMemoryReviewService(store)
        review.approve("Gadget-foo.js")
        review.set_test_mode(42)

        tester = RequestContext(user=UserRef(user_id=42, logged_in=True))
        unreviewed = GadgetModule("foo", repository=repository, page_store=store, review_service=review)
        reviewed = GadgetModule("foo", repository=repository, page_store=store, review_service=review)

        followed = unreviewed.get_content_for("Gadget-foo.js", tester)
        pinned = reviewed.get_content_for("Gadget-foo.js", RequestContext())

        assert followed is not None and followed.text == "target();"
        assert pinned is not None and pinned.page_name == "Gadget-foo.js"
        assert pinned.redirect_target == "Gadget-target.js"

    def test_bundle_membership_decides_page_kind(self, page_store, review_service, reader_context) -> None:
        # Listed as a style, so never gated even without a .css suffix
        page_store.add_revision("Gadget-theme", "theme v1")
        repo = InMemoryBundleRepository({"theme": Bundle(id="theme", styles=("Gadget-theme",))})
        module = GadgetModule("theme", repository=repo, page_store=page_store, review_service=review_service)

        content = module.get_content_for("Gadget-theme", reader_context)

        assert content is not None
        assert content.text == "theme v1"

    def test_max_redirects_override(self, repository) -> None:
        store = InMemoryPageStore()
        store.add_revision("Gadget-c.js", "c();")
        store.add_revision("Gadget-b.js", "", redirect_target="Gadget-c.js")
        store.add_revision("Gadget-foo.js", "", redirect_target="Gadget-b.js")
        module = GadgetModule("foo", repository=repository, page_store=store, config=ResolverConfig(max_redirects=1))

        assert module.get_content_for("Gadget-foo.js").page_name == "Gadget-b.js"
        assert module.get_content_for("Gadget-foo.js", max_redirects=2).page_name == "Gadget-c.js"


class TestFreshnessInfo:
    def test_reviewed_stamps_for_scripts_latest_for_styles(self, make_module, page_store) -> None:
        info = make_module().get_freshness_info(RequestContext())

        js_history = page_store.history("Gadget-foo.js")
        css_history = page_store.history("Gadget-foo.css")
        assert info["Gadget-foo.js"].revision_id == js_history[0].revision_id
        assert info["Gadget-foo.css"].revision_id == css_history[-1].revision_id

    def test_test_mode_user_gets_latest_stamps(self, make_module, page_store, tester_context) -> None:
        info = make_module().get_freshness_info(tester_context)
        assert info["Gadget-foo.js"].revision_id == page_store.history("Gadget-foo.js")[-1].revision_id

    def test_maintenance_context_uses_reviewed_lookup(self, repository, page_store, foo_bundle) -> None:
        review = MagicMock(spec=InMemoryReviewService)
        review.is_installed.return_value = True
        review.approved_version_stamps.return_value = {}
        module = GadgetModule("foo", repository=repository, page_store=page_store, review_service=review)

        module.get_freshness_info(None)

        review.approved_version_stamps.assert_called_once_with(["Gadget-foo.js"])
        review.is_user_in_test_mode.assert_not_called()

    def test_second_call_served_from_cache(self, make_module, page_store, reader_context) -> None:
        module = make_module()
        first = module.get_freshness_info(reader_context)

        page_store.add_revision("Gadget-foo.css", ".foo { color: green; }")
        second = module.get_freshness_info(reader_context)

        assert second is first
        assert module.freshness_cache.keys() == ["Gadget-foo.css|Gadget-foo.js"]

    def test_new_instance_sees_new_revisions(self, make_module, page_store, reader_context) -> None:
        first = make_module().get_freshness_info(reader_context)
        page_store.add_revision("Gadget-foo.css", ".foo { color: green; }")
        second = make_module().get_freshness_info(reader_context)

        assert first["Gadget-foo.css"] != second["Gadget-foo.css"]

    def test_backing_store_failure_propagates_uncached(self, make_module, page_store, reader_context) -> None:
        module = make_module()
        page_store.unavailable = True

        with pytest.raises(BackingStoreError):
            module.get_freshness_info(reader_context)
        assert len(module.freshness_cache) == 0

        page_store.unavailable = False
        assert "Gadget-foo.css" in module.get_freshness_info(reader_context)

    def test_stamps_cannot_be_mutated_through_the_result(self, make_module, reader_context) -> None:
        module = make_module()
        info = module.get_freshness_info(reader_context)

        with pytest.raises(TypeError):
            info["Gadget-foo.js"] = None  # type: ignore[index]
        with pytest.raises(AttributeError):
            info.clear()  # type: ignore[attr-defined]

        assert sorted(module.get_freshness_info(reader_context)) == ["Gadget-foo.css", "Gadget-foo.js"]

    def test_title_info_alias(self, make_module) -> None:
        module = make_module()
        assert module.get_title_info(None) is module.get_freshness_info(None)

    def test_placeholder_module_has_empty_info(self, make_module) -> None:
        assert make_module("ghost").get_freshness_info(None) == {}


class TestEvents:
    def test_resolution_emits_events(self, make_module, reader_context) -> None:
        emitter = ModuleEventEmitter()
        observer = MagicMock()
        emitter.subscribe(observer)
        module = make_module(emitter=emitter)

        module.get_freshness_info(reader_context)
        module.get_freshness_info(reader_context)

        types = [call[0][0].event_type for call in observer.on_event.call_args_list]
        assert types[0] == ModuleEventType.BUNDLE_RESOLVED
        assert ModuleEventType.TITLE_INFO_LOADED in types
        assert types[-1] == ModuleEventType.TITLE_INFO_CACHE_HIT
        assert types.count(ModuleEventType.BUNDLE_RESOLVED) == 1

    def test_fallback_event_for_unknown_bundle(self, make_module) -> None:
        emitter = ModuleEventEmitter()
        observer = MagicMock()
        emitter.subscribe(observer, event_types=[ModuleEventType.BUNDLE_FALLBACK])

        make_module("ghost", emitter=emitter).get_pages()

        observer.on_event.assert_called_once()
        assert observer.on_event.call_args[0][0].bundle_id == "ghost"

    def test_failure_event(self, make_module, page_store) -> None:
        emitter = ModuleEventEmitter()
        observer = MagicMock()
        emitter.subscribe(observer, event_types=[ModuleEventType.TITLE_INFO_FAILED])
        page_store.unavailable = True

        with pytest.raises(BackingStoreError):
            make_module(emitter=emitter).get_freshness_info(None)

        event = observer.on_event.call_args[0][0]
        assert event.mode == GatingMode.REVIEWED
        assert "unavailable" in event.metadata["error"]
