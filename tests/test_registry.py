from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core.drafts import DraftStore
from pagebuilder.core.forms import Catalogs, FormCollaborators, ListField
from pagebuilder.core.models import (
    SECTION_TYPES,
    CourseChapter,
    CourseLesson,
    CourseSection,
    FAQItem,
    FAQSection,
    FooterSection,
    HeroSection,
    NavSection,
    PageRef,
    PricingPlan,
    PricingSection,
    UnknownSection,
)
from pagebuilder.core.registry import REGISTRY, default_item, label_for, render_edit_form


def _store(section) -> DraftStore:
    store = DraftStore()
    store.seed(section)
    return store


def test_every_section_kind_has_an_editor() -> None:
    assert set(REGISTRY) == set(SECTION_TYPES)
    for kind, cls in SECTION_TYPES.items():
        store = _store(cls())
        form = render_edit_form(kind, store.draft, store)
        assert form.supported, kind
        assert form.title == f"Edit {label_for(kind)} Section"
        assert form.fields


def test_default_items() -> None:
    assert default_item("faq") == FAQItem(question="New Question?", answer="New Answer.")
    assert default_item("pricing", "features") == "New Feature"
    chapter = default_item("course")
    assert chapter.id.startswith("c-") and chapter.lessons == []
    with pytest.raises(KeyError):
        default_item("cta")


def test_unknown_kind_gets_unsupported_notice() -> None:
    section = UnknownSection(unknown_kind="timeline")
    store = _store(section)
    form = render_edit_form("timeline", store.draft, store)
    assert not form.supported
    assert form.message == 'Editing for the "timeline" section type is not supported yet.'
    assert form.field("unsupported").kind == "notice"


def test_mismatched_draft_is_unsupported() -> None:
    store = _store(FooterSection())
    assert not render_edit_form("faq", store.draft, store).supported


def test_hero_fields_follow_layout() -> None:
    store = _store(HeroSection(layout="split"))
    names = {node.name for node in render_edit_form("hero", store.draft, store).walk()}
    assert "split_image_prompt" in names
    assert "background_type" not in names

    store = _store(HeroSection(background_type="slider"))
    form = render_edit_form("hero", store.draft, store)
    assert isinstance(form.field("slides"), ListField)
    assert form.field("layout").rebuild


def test_nav_link_options_include_sections_and_pages() -> None:
    store = _store(NavSection(menu_items=[default_item("nav")]))
    catalogs = Catalogs(section_keys=["hero", "faq"], pages=[PageRef(id="about", name="About")])
    form = render_edit_form("nav", store.draft, store, FormCollaborators(catalogs=catalogs))
    values = [value for value, _ in form.field("menu_items.0.link").options]
    assert values == ["#", "#hero", "#faq", "/about"]


def test_footer_header_has_copyright_only() -> None:
    store = _store(FooterSection(copyright_text="(c) Me"))
    form = render_edit_form("footer", store.draft, store)
    links = form.field("social_links")
    assert [f.name for f in links.header] == ["copyright_text"]
    links.header[0].on_change("(c) You")
    links.add()
    assert store.draft.copyright_text == "(c) You"
    assert store.draft.social_links[0].network == "twitter"


def test_pricing_feature_list_edits_nested_items() -> None:
    store = _store(PricingSection(plans=[PricingPlan(name="Pro", features=["A", "B"])]))
    form = render_edit_form("pricing", store.draft, store)
    form.field("plans.0.features").move(1, 0)
    assert store.draft.plans[0].features == ["B", "A"]

    form = render_edit_form("pricing", store.draft, store)
    form.field("plans.0.features.1").on_change("Changed")
    form.field("plans.0.features").add()
    assert store.draft.plans[0].features == ["B", "Changed", "New Feature"]


def test_course_lessons_are_editable() -> None:
    chapter = CourseChapter(id="c1", title="Intro", lessons=[CourseLesson(id="l1", title="Welcome")])
    store = _store(CourseSection(chapters=[chapter]))
    form = render_edit_form("course", store.draft, store)
    form.field("chapters.0.lessons.0.title").on_change("Hello")
    form.field("chapters.0.lessons").add()
    lessons = store.draft.chapters[0].lessons
    assert lessons[0].title == "Hello"
    assert lessons[1].title == "New Lesson"


def test_callbacks_read_the_live_draft() -> None:
    store = _store(FAQSection(items=[FAQItem("Q1", "A1")]))
    form = render_edit_form("faq", store.draft, store)
    items = form.field("items")
    items.add()
    items.add()
    assert len(store.draft.items) == 3
    items.remove(0)
    assert [i.question for i in store.draft.items] == ["New Question?", "New Question?"]
