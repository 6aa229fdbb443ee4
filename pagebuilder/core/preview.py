"""Section rendering shared by the live page and the editor preview.

Both paths use the same Jinja2 template per section kind; a
:class:`RenderContext` decides whether the output is interactive.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from . import images as slots
from .forms import Catalogs
from .models import SECTION_TYPES, Section, Theme

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
PREVIEW_WIDTH = 1280


@dataclass(frozen=True)
class RenderContext:
    interactive: bool = True
    # Image slot keys with an image regeneration in progress.
    regenerating: FrozenSet[str] = field(default_factory=frozenset)


LIVE = RenderContext(interactive=True)
PREVIEW = RenderContext(interactive=False)


# Tailwind colour names -> (100, 600, 800) shades
PALETTE: Dict[str, tuple] = {
    "slate": ("#f1f5f9", "#475569", "#1e293b"),
    "gray": ("#f3f4f6", "#4b5563", "#1f2937"),
    "zinc": ("#f4f4f5", "#52525b", "#27272a"),
    "neutral": ("#f5f5f5", "#525252", "#262626"),
    "stone": ("#f5f5f4", "#57534e", "#292524"),
    "red": ("#fee2e2", "#dc2626", "#991b1b"),
    "orange": ("#ffedd5", "#ea580c", "#9a3412"),
    "amber": ("#fef3c7", "#d97706", "#92400e"),
    "yellow": ("#fef9c3", "#ca8a04", "#854d0e"),
    "lime": ("#ecfccb", "#65a30d", "#3f6212"),
    "green": ("#dcfce7", "#16a34a", "#166534"),
    "emerald": ("#d1fae5", "#059669", "#065f46"),
    "teal": ("#ccfbf1", "#0d9488", "#115e59"),
    "cyan": ("#cffafe", "#0891b2", "#155e75"),
    "sky": ("#e0f2fe", "#0284c7", "#075985"),
    "blue": ("#dbeafe", "#2563eb", "#1e40af"),
    "indigo": ("#e0e7ff", "#4f46e5", "#3730a3"),
    "violet": ("#ede9fe", "#7c3aed", "#5b21b6"),
    "purple": ("#f3e8ff", "#9333ea", "#6b21a8"),
    "fuchsia": ("#fae8ff", "#c026d3", "#86198f"),
    "pink": ("#fce7f3", "#db2777", "#9d174d"),
    "rose": ("#ffe4e6", "#e11d48", "#9f1239"),
}


def theme_vars(theme: Theme) -> Dict[str, str]:
    primary = PALETTE.get(theme.primary_color_name, PALETTE["indigo"])
    text = PALETTE.get(theme.text_color_name, PALETTE["slate"])
    font = re.sub(r"[^A-Za-z0-9 \-]", "", theme.font_family or "") or "Inter"
    return {
        "primary_light": primary[0],
        "primary": primary[1],
        "primary_dark": primary[2],
        "text": text[2],
        "muted": text[1],
        "font": font,
    }


def neutralize_markup(html: str) -> str:
    """Strip scripts and inline event handlers from third-party markup."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup.find_all(["script", "noscript"]):
        tag.decompose()
    for tag in soup.find_all(True):
        for attr in [a for a in tag.attrs if a.lower().startswith("on")]:
            del tag[attr]
        if tag.name == "form":
            tag.attrs.pop("action", None)
            tag["data-disabled"] = "true"
    return str(soup)


def embed_filter(code: str, ctx: RenderContext, api_key: str = "") -> Markup:
    code = (code or "").replace("[api_key]", api_key or "")
    if not ctx.interactive:
        code = neutralize_markup(code)
    return Markup(code)


def youtube_filter(video_id: str, background: bool = False) -> str:
    video_id = re.sub(r"[^A-Za-z0-9_\-]", "", video_id or "")
    url = f"https://www.youtube.com/embed/{video_id}"
    if background:
        url += f"?autoplay=1&mute=1&loop=1&controls=0&playlist={video_id}"
    return url


def _env(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["embed"] = embed_filter
    env.filters["youtube"] = youtube_filter
    env.globals.update(
        slider_key=slots.slider_key,
        gallery_key=slots.gallery_key,
        testimonial_key=slots.testimonial_key,
        chapter_key=slots.chapter_key,
    )
    return env


_ENV: Optional[Environment] = None


def environment() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = _env()
    return _ENV


def render_section(
    kind: str,
    section: Section,
    images: Mapping[str, Optional[str]],
    theme: Theme,
    context: RenderContext = LIVE,
    catalogs: Optional[Catalogs] = None,
    anchor: str = "",
) -> Markup:
    """Render one section to an HTML fragment.

    Unknown or mismatched kinds render a placeholder instead of raising.
    """

    env = environment()
    if kind not in SECTION_TYPES or not isinstance(section, SECTION_TYPES[kind]):
        logger.warning("Rendering placeholder for unsupported section kind %r", kind)
        tpl = env.get_template("sections/unsupported.html.j2")
        return Markup(tpl.render(kind=kind, anchor=anchor, ctx=context))
    tpl = env.get_template(f"sections/{kind}.html.j2")
    return Markup(
        tpl.render(
            section=section,
            images=dict(images),
            theme=theme,
            colors=theme_vars(theme),
            ctx=context,
            catalogs=catalogs or Catalogs(),
            anchor=anchor,
        )
    )


def render_document(content: str, theme: Theme, title: str = "", width: Optional[int] = None) -> str:
    """Wrap rendered sections in a full HTML page."""
    tpl = environment().get_template("page.html.j2")
    return tpl.render(
        content=Markup(content),
        title=title,
        theme=theme,
        colors=theme_vars(theme),
        width=width,
    )


def preview_document(fragment: str, theme: Theme, title: str = "Preview") -> str:
    return render_document(fragment, theme, title=title, width=PREVIEW_WIDTH)
