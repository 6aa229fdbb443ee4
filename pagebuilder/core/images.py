"""Image resolution for previews and the slot keys each section kind renders.

An image field on a section holds an *override*: empty, a displayable URL
(``http(s)://`` or an inline ``data:image`` URL), or free text that is a prompt
for the image pipeline. Only URLs can be shown directly; anything else falls
back to the last resolved image stored for the slot.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from .models import (
    CourseSection,
    GallerySection,
    HeroSection,
    ImageStore,
    NavSection,
    Section,
    TestimonialsSection,
)

RESOLVED_PREFIXES = ("http://", "https://", "data:image")


def is_resolved_media(value: Optional[str]) -> bool:
    """True when ``value`` can be displayed as-is."""

    return bool(value) and value.strip().startswith(RESOLVED_PREFIXES)  # type: ignore[union-attr]


def resolve(store: ImageStore, key: str, override: Optional[str] = None) -> Optional[str]:
    """Return what the preview should display for slot ``key``.

    A resolved URL override wins; prompts and empty overrides fall back to the
    stored image, and a missing entry resolves to ``None`` ("no image").
    """

    if is_resolved_media(override):
        return override.strip()  # type: ignore[union-attr]
    return store.get(key) or None


# ---------------------------------------------------------------------------
# Slot keys
# ---------------------------------------------------------------------------


def slider_key(index: int) -> str:
    return f"hero_slider_{index}"


def gallery_key(index: int) -> str:
    return f"gallery_{index}"


def testimonial_key(index: int) -> str:
    return f"testimonial_{index}"


def chapter_key(chapter_id: str) -> str:
    return f"chapter_{chapter_id}"


# (slot key, override) pairs for the image fields a section currently shows.
SlotList = List[Tuple[str, str]]


def _nav_slots(section: NavSection) -> SlotList:
    if section.logo_type != "image":
        return []
    return [("logo", section.logo_image_prompt)]


def _hero_slots(section: HeroSection) -> SlotList:
    if section.layout == "split":
        return [("hero_split", section.split_image_prompt)]
    if section.background_type == "image":
        return [("hero", section.image_prompt)]
    if section.background_type == "slider":
        return [(slider_key(i), slide.image_prompt) for i, slide in enumerate(section.slides)]
    return []


def _gallery_slots(section: GallerySection) -> SlotList:
    return [(gallery_key(i), item.image_prompt) for i, item in enumerate(section.items)]


def _testimonial_slots(section: TestimonialsSection) -> SlotList:
    return [(testimonial_key(i), item.avatar_image_prompt) for i, item in enumerate(section.items)]


def _course_slots(section: CourseSection) -> SlotList:
    slots: SlotList = []
    if section.media_type in ("image", ""):
        slots.append(("course_banner", section.image_prompt))
    for chapter in section.chapters:
        if chapter.image_prompt and chapter.id:
            slots.append((chapter_key(chapter.id), chapter.image_prompt))
    return slots


SLOT_FUNCTIONS: Dict[str, Callable[..., SlotList]] = {
    "nav": _nav_slots,
    "hero": _hero_slots,
    "gallery": _gallery_slots,
    "testimonials": _testimonial_slots,
    "course": _course_slots,
}


def image_slots(section: Section) -> SlotList:
    """Slot keys and overrides for ``section``, computed from its current items."""

    func = SLOT_FUNCTIONS.get(section.section_kind)
    return func(section) if func is not None else []


def preview_images(section: Section, store: ImageStore) -> Dict[str, Optional[str]]:
    """Return a copy of ``store`` with every slot of ``section`` re-resolved.

    Keys are recomputed from the section's current item order, so adding,
    removing or reordering items immediately changes which image renders where.
    """

    images: Dict[str, Optional[str]] = dict(store)
    for key, override in image_slots(section):
        images[key] = resolve(store, key, override)
    return images


def promotable_images(section: Section) -> Dict[str, str]:
    """Slots whose override is already a displayable URL."""

    return {key: override.strip() for key, override in image_slots(section) if is_resolved_media(override)}
