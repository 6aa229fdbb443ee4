"""JSON persistence for pages, stashed drafts and the media library."""

from __future__ import annotations

import asyncio
import base64
import copy
import json
import logging
import mimetypes
import re
from pathlib import Path
from typing import List, Optional

from .errors import CollaboratorError, PageFormatError
from .forms import Catalogs
from .images import promotable_images
from .models import CustomForm, MediaFile, Page, PageRef, Product, Section, new_id, section_from_dict

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".page.json"
CATALOG_FILE = "catalog.json"


def save_page(path: str | Path, page: Page) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(page.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def load_page(path: str | Path) -> Page:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise PageFormatError(f"Could not read page file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PageFormatError(f"{path} does not contain a page object")
    return Page.from_dict(data)


class PageFileStore:
    """Persistence collaborator backed by a single page JSON file.

    ``save`` is the callback handed to the editor: it replaces one section of
    the committed page, promotes resolved image URLs into the image store and
    writes the file.
    """

    def __init__(self, path: str | Path, page: Optional[Page] = None) -> None:
        self.path = Path(path)
        self.page = page if page is not None else (load_page(self.path) if self.path.exists() else Page())

    def commit(self, section_key: str, section: Section) -> Page:
        page = copy.deepcopy(self.page)
        page.sections[section_key] = copy.deepcopy(section)
        if section_key not in page.section_order:
            page.section_order.append(section_key)
        promoted = promotable_images(section)
        if promoted:
            logger.info("Promoting images for %s: %s", section_key, ", ".join(sorted(promoted)))
            page.images.update(promoted)
        save_page(self.path, page)
        self.page = page
        return page

    async def save(self, section_key: str, section: Section) -> None:
        await asyncio.to_thread(self.commit, section_key, section)


class DraftSnapshotStore:
    """Load/save capability for unsaved drafts, one JSON file per section key."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, section_key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]+", "_", section_key) or "section"
        return self.directory / f"{safe}.json"

    def save(self, section_key: str, section: Section) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(section_key)
        path.write_text(json.dumps(section.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        return path

    def load(self, section_key: str) -> Optional[Section]:
        path = self._path(section_key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable draft snapshot %s", path)
            return None
        return section_from_dict(data)

    def clear(self, section_key: str) -> None:
        self._path(section_key).unlink(missing_ok=True)


class MediaLibrary:
    """Media catalog kept in ``media.json``; uploads are stored inline as data URLs."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.index_path = self.directory / "media.json"
        self.files: List[MediaFile] = []
        self.load()

    def load(self) -> None:
        if not self.index_path.exists():
            self.files[:] = []
            return
        try:
            data = json.loads(self.index_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable media index %s", self.index_path)
            data = []
        self.files[:] = [MediaFile.from_dict(item) for item in data if isinstance(item, dict)]

    def save(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = [f.to_dict() for f in self.files]
        self.index_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def load_file(self, path: str | Path, description: str = "") -> MediaFile:
        """Read an image into a new media record without touching the library."""
        path = Path(path)
        mime, _ = mimetypes.guess_type(path.name)
        if not mime or not mime.startswith("image/"):
            raise CollaboratorError(f"{path.name} is not an image.")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise CollaboratorError(f"Could not read {path.name}.", cause=exc) from exc
        url = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
        keywords = [w for w in re.split(r"[^A-Za-z0-9]+", path.stem.lower()) if w]
        return MediaFile(id=new_id("m"), url=url, name=path.name, description=description, keywords=keywords)

    def add(self, media: MediaFile) -> None:
        if any(f.id == media.id for f in self.files):
            return
        self.files.append(media)
        self.save()
        logger.info("Added %s to the media library", media.name)

    async def upload(self, path: str) -> MediaFile:
        return await asyncio.to_thread(self.load_file, path)


def load_catalogs(page_path: str | Path, media: Optional[List[MediaFile]] = None) -> Catalogs:
    """Collect editor catalogs for the page stored at ``page_path``.

    Products and custom forms come from ``catalog.json`` beside the page;
    link targets are the other ``*.page.json`` files in the same folder.
    """
    page_path = Path(page_path)
    catalogs = Catalogs(media=media if media is not None else [])
    catalog_path = page_path.with_name(CATALOG_FILE)
    if catalog_path.exists():
        try:
            data = json.loads(catalog_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable catalog %s", catalog_path)
            data = {}
        if isinstance(data, dict):
            catalogs.products = [Product.from_dict(p) for p in data.get("products") or [] if isinstance(p, dict)]
            catalogs.custom_forms = [
                CustomForm.from_dict(f) for f in data.get("custom_forms") or [] if isinstance(f, dict)
            ]
    for other in sorted(page_path.parent.glob(f"*{PAGE_SUFFIX}")):
        page_id = other.name[: -len(PAGE_SUFFIX)]
        try:
            name = load_page(other).name
        except PageFormatError:
            logger.warning("Skipping unreadable page %s", other)
            continue
        catalogs.pages.append(PageRef(id=page_id, name=name or page_id))
    return catalogs
