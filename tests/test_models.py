from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core.models import (
    SECTION_TYPES,
    FAQItem,
    FAQSection,
    Page,
    PricingSection,
    UnknownSection,
    new_id,
    section_from_dict,
)


def test_section_from_dict_builds_tagged_variant() -> None:
    section = section_from_dict({"kind": "faq", "title": "Help", "items": [{"question": "Q1", "answer": "A1"}]})
    assert isinstance(section, FAQSection)
    assert section.items == [FAQItem(question="Q1", answer="A1")]
    assert section.to_dict()["kind"] == "faq"


def test_every_kind_round_trips_through_dict() -> None:
    for kind, cls in SECTION_TYPES.items():
        section = cls()
        restored = section_from_dict(section.to_dict())
        assert restored == section, kind


def test_malformed_fields_fall_back_to_defaults() -> None:
    section = section_from_dict({"kind": "pricing", "title": 5, "plans": "nope", "bogus": True})
    assert isinstance(section, PricingSection)
    assert section.title == "5"
    assert section.plans == []


def test_unknown_kind_is_preserved_verbatim() -> None:
    raw = {"kind": "timeline", "events": [{"year": 2020}], "title": "History"}
    section = section_from_dict(raw)
    assert isinstance(section, UnknownSection)
    assert section.section_kind == "timeline"
    assert section.to_dict() == raw


def test_page_from_dict_uses_keys_as_kind_for_legacy_sections() -> None:
    page = Page.from_dict({"sections": {"faq": {"title": "Old"}}, "images": {"hero": "https://x/h.png", "bad": 3}})
    assert isinstance(page.sections["faq"], FAQSection)
    assert page.section_order == ["faq"]
    assert page.images == {"hero": "https://x/h.png"}


def test_ordered_keys_appends_sections_missing_from_order() -> None:
    page = Page(
        section_order=["b", "ghost"],
        sections={"a": FAQSection(), "b": FAQSection()},
    )
    assert page.ordered_keys() == ["b", "a"]


def test_ordered_keys_lists_a_repeated_key_once() -> None:
    page = Page(
        section_order=["faq", "cta", "faq"],
        sections={"faq": FAQSection(), "cta": FAQSection()},
    )
    assert page.ordered_keys() == ["faq", "cta"]


def test_page_round_trip() -> None:
    page = Page(name="Demo", section_order=["faq"], sections={"faq": FAQSection(title="T")})
    assert Page.from_dict(page.to_dict()) == page


def test_new_id_has_prefix() -> None:
    value = new_id("c")
    assert value.startswith("c-")
    assert len(value) == 10
