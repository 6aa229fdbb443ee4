from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core.errors import CollaboratorError, PageFormatError
from pagebuilder.core.models import FAQSection, GalleryItem, GallerySection, HeroSection, Page, PageRef
from pagebuilder.core.storage import (
    DraftSnapshotStore,
    MediaLibrary,
    PageFileStore,
    load_catalogs,
    load_page,
    save_page,
)


def test_save_and_load_page(tmp_path: Path) -> None:
    page = Page(name="Demo", section_order=["faq"], sections={"faq": FAQSection(title="Help")})
    path = tmp_path / "demo.page.json"
    save_page(path, page)
    assert load_page(path) == page
    assert not path.with_suffix(".json.tmp").exists()


def test_load_page_rejects_bad_files(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(PageFormatError):
        load_page(broken)
    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(PageFormatError):
        load_page(listing)
    with pytest.raises(PageFormatError):
        load_page(tmp_path / "missing.json")


def test_file_store_commits_one_section_and_promotes_urls(tmp_path: Path) -> None:
    path = tmp_path / "site.page.json"
    page = Page(
        section_order=["hero", "gallery"],
        sections={"hero": HeroSection(title="Old"), "gallery": GallerySection()},
        images={"hero": "https://img/old.png"},
    )
    save_page(path, page)
    store = PageFileStore(path)

    gallery = GallerySection(
        items=[GalleryItem(image_prompt="https://img/a.png"), GalleryItem(image_prompt="a lighthouse at dusk")]
    )
    asyncio.run(store.save("gallery", gallery))

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["sections"]["gallery"]["items"][0]["image_prompt"] == "https://img/a.png"
    assert saved["sections"]["hero"]["title"] == "Old"
    assert saved["images"] == {"hero": "https://img/old.png", "gallery_0": "https://img/a.png"}
    assert store.page.sections["gallery"] == gallery
    assert store.page.sections["gallery"] is not gallery


def test_file_store_appends_new_keys_to_order(tmp_path: Path) -> None:
    store = PageFileStore(tmp_path / "new.page.json")
    store.commit("faq", FAQSection(title="New"))
    assert store.page.section_order == ["faq"]
    assert load_page(store.path).sections["faq"].title == "New"


def test_draft_snapshots(tmp_path: Path) -> None:
    snapshots = DraftSnapshotStore(tmp_path / "drafts")
    assert snapshots.load("faq") is None
    snapshots.save("faq", FAQSection(title="Draft"))
    assert snapshots.load("faq") == FAQSection(title="Draft")
    assert (tmp_path / "drafts" / "faq.json").exists()
    snapshots.clear("faq")
    snapshots.clear("faq")
    assert snapshots.load("faq") is None


def test_unreadable_snapshot_is_ignored(tmp_path: Path) -> None:
    snapshots = DraftSnapshotStore(tmp_path)
    (tmp_path / "faq.json").write_text("oops", encoding="utf-8")
    assert snapshots.load("faq") is None


def test_media_library_stores_images_as_data_urls(tmp_path: Path) -> None:
    image = tmp_path / "Team Photo.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    library = MediaLibrary(tmp_path / "media")
    media = asyncio.run(library.upload(str(image)))
    assert media.url.startswith("data:image/png;base64,")
    assert media.keywords == ["team", "photo"]
    assert library.files == []
    assert not library.index_path.exists()

    library.add(media)
    library.add(media)
    assert library.files == [media]

    reloaded = MediaLibrary(tmp_path / "media")
    assert [m.id for m in reloaded.files] == [media.id]


def test_media_library_rejects_non_images(tmp_path: Path) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("hello", encoding="utf-8")
    library = MediaLibrary(tmp_path / "media")
    with pytest.raises(CollaboratorError):
        library.load_file(notes)
    assert library.files == []


def test_catalogs_come_from_catalog_file_and_sibling_pages(tmp_path: Path) -> None:
    save_page(tmp_path / "home.page.json", Page(name="Home"))
    save_page(tmp_path / "pricing.page.json", Page(name="Pricing"))
    (tmp_path / "broken.page.json").write_text("{", encoding="utf-8")
    (tmp_path / "catalog.json").write_text(
        json.dumps(
            {
                "products": [{"id": "p1", "name": "Bread", "price": 4.5}, "junk"],
                "custom_forms": [{"id": "f1", "name": "Signup", "fields": [{"id": "email", "label": "Email"}]}],
            }
        ),
        encoding="utf-8",
    )
    media = []
    catalogs = load_catalogs(tmp_path / "home.page.json", media)
    assert catalogs.media is media
    assert [p.name for p in catalogs.products] == ["Bread"]
    assert catalogs.products[0].price == 4.5
    assert catalogs.form("f1").fields[0].label == "Email"
    assert catalogs.pages == [PageRef(id="home", name="Home"), PageRef(id="pricing", name="Pricing")]


def test_catalogs_are_empty_without_catalog_file(tmp_path: Path) -> None:
    catalogs = load_catalogs(tmp_path / "solo.json")
    assert catalogs.products == []
    assert catalogs.custom_forms == []
    assert catalogs.pages == []
