from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core.images import image_slots, preview_images, promotable_images, resolve
from pagebuilder.core.models import (
    CourseChapter,
    CourseSection,
    GalleryItem,
    GallerySection,
    HeroSection,
    HeroSlide,
    NavSection,
)


def test_url_override_wins_over_store() -> None:
    assert resolve({"hero": "url1"}, "hero", "https://x/y.png") == "https://x/y.png"


def test_prompt_override_falls_back_to_store() -> None:
    assert resolve({"hero": "url1"}, "hero", "a sunset over mountains") == "url1"


def test_data_url_override_is_displayed() -> None:
    assert resolve({}, "logo", "data:image/png;base64,AAAA") == "data:image/png;base64,AAAA"


def test_missing_image_resolves_to_none() -> None:
    assert resolve({}, "hero", "") is None
    assert resolve({"hero": ""}, "hero", None) is None


def test_hero_slots_follow_layout() -> None:
    assert image_slots(HeroSection(layout="split", split_image_prompt="p")) == [("hero_split", "p")]
    assert image_slots(HeroSection(background_type="image", image_prompt="p")) == [("hero", "p")]
    assert image_slots(HeroSection(background_type="video")) == []
    slides = HeroSection(background_type="slider", slides=[HeroSlide(image_prompt="a"), HeroSlide(image_prompt="b")])
    assert [key for key, _ in image_slots(slides)] == ["hero_slider_0", "hero_slider_1"]


def test_nav_logo_slot_only_for_image_logos() -> None:
    assert image_slots(NavSection(logo_type="text")) == []
    assert image_slots(NavSection(logo_type="image", logo_image_prompt="logo")) == [("logo", "logo")]


def test_course_chapter_slots_need_prompt_and_id() -> None:
    course = CourseSection(
        chapters=[CourseChapter(id="c1", image_prompt="p1"), CourseChapter(id="", image_prompt="p2"), CourseChapter(id="c3")]
    )
    assert [key for key, _ in image_slots(course)] == ["course_banner", "chapter_c1"]


def test_preview_keys_follow_current_item_order() -> None:
    store = {"gallery_0": "https://img/0.png", "gallery_1": "https://img/1.png"}
    gallery = GallerySection(
        items=[GalleryItem(image_prompt="https://new/first.png"), GalleryItem(image_prompt="a cat")]
    )
    images = preview_images(gallery, store)
    assert images["gallery_0"] == "https://new/first.png"
    assert images["gallery_1"] == "https://img/1.png"
    assert store["gallery_0"] == "https://img/0.png"

    added = GallerySection(items=gallery.items + [GalleryItem(image_prompt="a dog")])
    assert preview_images(added, store)["gallery_2"] is None


def test_promotable_images_only_include_urls() -> None:
    hero = HeroSection(background_type="slider", slides=[HeroSlide(image_prompt="https://a/b.png"), HeroSlide(image_prompt="a prompt")])
    assert promotable_images(hero) == {"hero_slider_0": "https://a/b.png"}
