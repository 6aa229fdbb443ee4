from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core.models import (
    SECTION_TYPES,
    ContactSection,
    EmbedSection,
    FAQItem,
    FAQSection,
    GalleryItem,
    GallerySection,
    HeroSection,
    Theme,
    UnknownSection,
)
from pagebuilder.core.preview import (
    LIVE,
    PREVIEW,
    RenderContext,
    neutralize_markup,
    preview_document,
    render_section,
    theme_vars,
)
from pagebuilder.core.registry import render_preview


def test_every_kind_renders_with_defaults() -> None:
    for kind, cls in SECTION_TYPES.items():
        html = render_section(kind, cls(), {}, Theme(), PREVIEW)
        assert html.strip(), kind
        assert "pb-unsupported" not in html, kind


def test_unknown_kind_renders_placeholder() -> None:
    html = render_section("timeline", UnknownSection(unknown_kind="timeline"), {}, Theme())
    assert 'Editing for the "timeline" section type is not supported yet.' in html


def test_mismatched_kind_renders_placeholder() -> None:
    html = render_section("faq", HeroSection(title="Hi"), {}, Theme())
    assert "pb-unsupported" in html


def test_preview_neutralizes_embedded_scripts() -> None:
    section = EmbedSection(embed_code='<div onclick="steal()">Hi</div><script>alert(1)</script>')
    preview = render_section("embed", section, {}, Theme(), PREVIEW)
    assert "Hi" in preview
    assert "<script" not in preview
    assert "onclick" not in preview

    live = render_section("embed", section, {}, Theme(), LIVE)
    assert "<script>alert(1)</script>" in live


def test_embed_substitutes_api_key() -> None:
    section = EmbedSection(embed_code='<iframe src="https://widget.example/?key=[api_key]"></iframe>', api_key="abc")
    html = render_section("embed", section, {}, Theme(), PREVIEW)
    assert "key=abc" in html


def test_neutralize_markup_disables_forms() -> None:
    html = neutralize_markup('<form action="https://evil" onsubmit="x()"><input name="q"></form>')
    assert "action" not in html
    assert "onsubmit" not in html
    assert 'data-disabled="true"' in html


def test_preview_disables_contact_form() -> None:
    html = render_section("contact", ContactSection(), {}, Theme(), PREVIEW)
    assert "disabled" in html


def test_regenerating_overlay_marks_busy_slots_on_canvas() -> None:
    hero = HeroSection(image_prompt="https://img/h.png")
    busy = frozenset({"hero"})
    canvas = render_section(
        "hero", hero, {"hero": "https://img/h.png"}, Theme(), RenderContext(interactive=False, regenerating=busy)
    )
    assert "Regenerating" in canvas
    idle = render_section("hero", hero, {"hero": "https://img/h.png"}, Theme(), RenderContext(interactive=False))
    assert "Regenerating" not in idle


def test_editor_preview_never_shows_regenerating_overlay() -> None:
    hero = HeroSection(image_prompt="https://img/h.png")
    html = render_preview("hero", hero, {"hero": "https://img/old.png"}, Theme())
    assert "Regenerating" not in html
    assert PREVIEW.regenerating == frozenset()


def test_missing_image_renders_placeholder() -> None:
    html = render_section("hero", HeroSection(), {}, Theme(), PREVIEW)
    assert "No image" in html


def test_preview_tracks_item_order() -> None:
    store = {"gallery_0": "https://img/zero.png", "gallery_1": "https://img/one.png"}
    ordered = GallerySection(items=[GalleryItem(image_prompt="a"), GalleryItem(image_prompt="https://img/new.png")])
    html = render_preview("gallery", ordered, store, Theme())
    assert html.index("zero.png") < html.index("new.png")

    swapped = GallerySection(items=list(reversed(ordered.items)))
    html = render_preview("gallery", swapped, store, Theme())
    assert html.index("new.png") < html.index("one.png")
    assert "zero.png" not in html


def test_faq_preview_shows_items_in_order() -> None:
    faq = FAQSection(items=[FAQItem("Second?", "b"), FAQItem("First?", "a")])
    html = render_preview("faq", faq, {}, Theme())
    assert html.index("Second?") < html.index("First?")


def test_preview_document_uses_desktop_width() -> None:
    html = preview_document("<p>body</p>", Theme(), title="Edit FAQ Section")
    assert "1280" in html
    assert "<p>body</p>" in html
    assert "Edit FAQ Section" in html


def test_theme_vars_fall_back_for_unknown_colors() -> None:
    colors = theme_vars(Theme(primary_color_name="nope", font_family="Inter; } body { x"))
    assert colors["primary"].startswith("#")
    assert "}" not in colors["font"]
