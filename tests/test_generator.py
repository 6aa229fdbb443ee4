from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core import generator
from pagebuilder.core.models import CTASection, EmbedSection, FAQSection, HeroSection, Page
from pagebuilder.core.preview import RenderContext


def _page() -> Page:
    return Page(
        name="Launch",
        section_order=["cta", "faq", "embed"],
        sections={
            "faq": FAQSection(title="Questions"),
            "cta": CTASection(title="Join us", cta_text="Sign up"),
            "embed": EmbedSection(embed_code="<script>window.widget=1</script>"),
        },
    )


def test_render_page_follows_section_order() -> None:
    html = generator.render_page(_page())
    assert html.index('id="cta"') < html.index('id="faq"') < html.index('id="embed"')
    assert "<title>Launch</title>" in html


def test_published_page_keeps_embed_scripts() -> None:
    assert "<script>window.widget=1</script>" in generator.render_page(_page())


def test_export_site_writes_index(tmp_path: Path) -> None:
    target = generator.export_site(_page(), tmp_path / "out")
    assert target == tmp_path / "out" / "index.html"
    assert "Join us" in target.read_text(encoding="utf-8")


def test_repeated_order_entry_renders_section_once() -> None:
    page = _page()
    page.section_order = ["cta", "faq", "cta", "embed"]
    html = generator.render_page(page)
    assert html.count('id="cta"') == 1


def test_canvas_marks_regenerating_images() -> None:
    page = Page(section_order=["hero"], sections={"hero": HeroSection(image_prompt="https://img/h.png")})
    idle = generator.render_page(page, RenderContext(interactive=False))
    busy = generator.render_page(page, RenderContext(interactive=False, regenerating=frozenset({"hero"})))
    assert 'class="pb-image-busy"' not in idle
    assert 'class="pb-image-busy"' in busy
