"""Whole-page rendering and site export."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .forms import Catalogs
from .models import Page
from .preview import LIVE, RenderContext, render_document, render_section


def render_sections(page: Page, context: RenderContext = LIVE, catalogs: Optional[Catalogs] = None) -> str:
    parts = []
    for key in page.ordered_keys():
        section = page.sections[key]
        parts.append(
            render_section(section.section_kind, section, page.images, page.theme, context, catalogs, anchor=key)
        )
    return "\n".join(parts)


def render_page(page: Page, context: RenderContext = LIVE, catalogs: Optional[Catalogs] = None) -> str:
    return render_document(render_sections(page, context, catalogs), page.theme, title=page.name)


def export_site(page: Page, output_dir: str | Path, catalogs: Optional[Catalogs] = None) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / "index.html"
    target.write_text(render_page(page, LIVE, catalogs), encoding="utf-8")
    return target
