"""Main application window for the page builder."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import FrozenSet, Optional

from PyQt6 import QtCore, QtGui, QtWidgets
from PyQt6.QtWebEngineWidgets import QWebEngineView

from ..config import SettingsManager
from ..core import generator, storage
from ..core.errors import PageFormatError
from ..core.forms import Catalogs
from ..core.models import (
    FAQItem,
    FAQSection,
    FeatureItem,
    FeaturesSection,
    FooterSection,
    HeroSection,
    NavMenuItem,
    NavSection,
    Page,
    SocialLink,
)
from ..core.preview import RenderContext
from ..core.regeneration import OpenAIRegenerator
from ..core.registry import label_for
from ..core.session import EditorCollaborators, EditorHost
from .section_editor import SectionEditorDialog

logger = logging.getLogger(__name__)

APP_TITLE = "PyQt Page Builder"
PAGE_FILTER = "Page (*.page.json *.json)"

class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, settings: SettingsManager, path: Optional[str] = None) -> None:
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1240, 800)

        self.settings = settings
        self.store: Optional[storage.PageFileStore] = None
        self.host: Optional[EditorHost] = None
        self.media = storage.MediaLibrary(settings.directory / "media")
        self.snapshots = storage.DraftSnapshotStore(settings.drafts_dir)
        self.regenerator = OpenAIRegenerator(
            model=settings.openai_model,
            timeout=settings.request_timeout,
            api_key=settings.openai_api_key(),
        )
        self._preview_tmp: Optional[str] = None

        self._build_ui()
        self._build_menu()
        self._bind_events()

        if path:
            self.open_page(path)

    # ------------------------------------------------------------------ UI --
    def _build_ui(self) -> None:
        splitter = QtWidgets.QSplitter(self)
        splitter.setOrientation(QtCore.Qt.Orientation.Horizontal)
        self.setCentralWidget(splitter)

        # Sections panel
        left_panel = QtWidgets.QWidget(self)
        left_layout = QtWidgets.QVBoxLayout(left_panel)
        left_layout.setContentsMargins(6, 6, 6, 6)
        left_layout.setSpacing(6)

        self.sections_list = QtWidgets.QListWidget(left_panel)
        self.sections_list.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)
        self.btn_edit = QtWidgets.QPushButton("Edit Section…", left_panel)

        left_layout.addWidget(QtWidgets.QLabel("Sections", left_panel))
        left_layout.addWidget(self.sections_list, 1)
        left_layout.addWidget(self.btn_edit)

        # Canvas
        right_panel = QtWidgets.QWidget(self)
        right_layout = QtWidgets.QVBoxLayout(right_panel)
        right_layout.setContentsMargins(6, 6, 6, 6)
        right_layout.setSpacing(6)

        self.preview = QWebEngineView(right_panel)
        right_layout.addWidget(QtWidgets.QLabel("Page", right_panel))
        right_layout.addWidget(self.preview, 1)

        splitter.addWidget(left_panel)
        splitter.addWidget(right_panel)
        splitter.setSizes([260, 980])

        self.status = self.statusBar()

    def _build_menu(self) -> None:
        bar = self.menuBar()
        if bar is None:
            bar = QtWidgets.QMenuBar(self)
            self.setMenuBar(bar)

        file_menu = bar.addMenu("&File")
        self.act_new = QtGui.QAction("New Page…", self)
        self.act_open = QtGui.QAction("Open Page…", self)
        self.act_export = QtGui.QAction("Export Site…", self)
        self.act_quit = QtGui.QAction("Quit", self)
        if file_menu is not None:
            file_menu.addActions([self.act_new, self.act_open])
            file_menu.addSeparator()
            file_menu.addAction(self.act_export)
            file_menu.addSeparator()
            file_menu.addAction(self.act_quit)

        help_menu = bar.addMenu("&Help")
        self.act_about = QtGui.QAction("About", self)
        if help_menu is not None:
            help_menu.addAction(self.act_about)

    def _bind_events(self) -> None:
        self.sections_list.itemDoubleClicked.connect(lambda _item: self.edit_selected_section())
        self.btn_edit.clicked.connect(self.edit_selected_section)
        self.act_new.triggered.connect(self.new_page_dialog)
        self.act_open.triggered.connect(self.open_page_dialog)
        self.act_export.triggered.connect(self.export_site)
        self.act_quit.triggered.connect(self.close)
        self.act_about.triggered.connect(self.show_about)

    # -------------------------------------------------------------- Page Ops --
    def new_page_dialog(self) -> None:
        name, ok = QtWidgets.QInputDialog.getText(self, "New Page", "Page name:", text="My Page")
        if not ok or not name.strip():
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Save Page As", "", PAGE_FILTER)
        if not path:
            return
        path = path if path.endswith(".json") else f"{path}.page.json"
        page = _starter_page(name.strip())
        storage.save_page(path, page)
        self.open_page(path)

    def open_page_dialog(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Open Page", "", PAGE_FILTER)
        if path:
            self.open_page(path)

    def open_page(self, path: str) -> None:
        try:
            self.store = storage.PageFileStore(path)
        except PageFormatError as exc:
            QtWidgets.QMessageBox.warning(self, "Open Page", str(exc))
            return
        store = self.store
        self.host = EditorHost(
            lambda: store.page,
            EditorCollaborators(
                save=store.save,
                regenerate=self.regenerator,
                catalogs=self._catalogs(),
                upload=self.media.upload,
                add_media=self.media.add,
                snapshots=self.snapshots,
            ),
            default_zoom=self.settings.default_zoom,
        )
        self._refresh_sections_list()
        self.update_window_title()
        self.update_preview()
        if self.status is not None:
            self.status.showMessage(f"Opened {os.path.basename(path)}", 4000)

    def export_site(self) -> None:
        if self.store is None:
            return
        out_dir = QtWidgets.QFileDialog.getExistingDirectory(self, "Export Site To…")
        if not out_dir:
            return
        generator.export_site(self.store.page, out_dir, self._catalogs())
        if self.status is not None:
            self.status.showMessage(f"Exported site to {out_dir}", 5000)
        QtWidgets.QMessageBox.information(self, "Export complete", f"Your page was exported to:\n{out_dir}")

    # ------------------------------------------------------------ Sections --
    def _catalogs(self) -> Catalogs:
        if self.store is None:
            return Catalogs(media=self.media.files)
        catalogs = storage.load_catalogs(self.store.path, self.media.files)
        catalogs.section_keys = self.store.page.ordered_keys()
        return catalogs

    def _refresh_sections_list(self, select_key: Optional[str] = None) -> None:
        self.sections_list.clear()
        if self.store is None:
            return
        for key in self.store.page.ordered_keys():
            section = self.store.page.sections[key]
            item = QtWidgets.QListWidgetItem(f"{label_for(section.section_kind)}  ({key})")
            item.setData(QtCore.Qt.ItemDataRole.UserRole, key)
            self.sections_list.addItem(item)
            if key == select_key:
                self.sections_list.setCurrentItem(item)

    def edit_selected_section(self) -> None:
        item = self.sections_list.currentItem()
        if item is None or self.host is None:
            return
        key = item.data(QtCore.Qt.ItemDataRole.UserRole)
        self.host.collaborators.catalogs = self._catalogs()
        session = self.host.open(key)
        dialog = SectionEditorDialog(session, debounce_ms=self.settings.preview_debounce_ms, parent=self)
        dialog.regenerating_changed.connect(self.update_preview)
        if dialog.exec() == QtWidgets.QDialog.DialogCode.Accepted and self.status is not None:
            self.status.showMessage(f"Saved {key}", 3000)
        self._refresh_sections_list(select_key=key)
        self.update_preview()

    def update_preview(self, regenerating: FrozenSet[str] = frozenset()) -> None:
        """Render the page canvas; ``regenerating`` slots show a busy overlay."""
        if self.store is None:
            return
        if self._preview_tmp and os.path.isdir(self._preview_tmp):
            shutil.rmtree(self._preview_tmp, ignore_errors=True)
        self._preview_tmp = tempfile.mkdtemp(prefix="pagebuilder_preview_")
        context = RenderContext(interactive=False, regenerating=regenerating)
        html = generator.render_page(self.store.page, context, self._catalogs())
        path = Path(self._preview_tmp) / "index.html"
        path.write_text(html, encoding="utf-8")
        self.preview.setUrl(QtCore.QUrl.fromLocalFile(str(path)))

    # ---------------------------------------------------------------- Misc --
    def show_about(self) -> None:
        QtWidgets.QMessageBox.information(
            self,
            "About",
            f"{APP_TITLE}\n\nA section-based landing page editor built with PyQt6.",
        )

    def update_window_title(self) -> None:
        name = self.store.page.name if self.store else "Untitled"
        suffix = f" — {self.store.path.name}" if self.store else ""
        self.setWindowTitle(f"{APP_TITLE} — {name}{suffix}")

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802 (Qt override)
        if self._preview_tmp and os.path.isdir(self._preview_tmp):
            shutil.rmtree(self._preview_tmp, ignore_errors=True)
        super().closeEvent(event)


def _starter_page(name: str) -> Page:
    sections = {
        "nav": NavSection(
            logo_text=name,
            menu_items=[NavMenuItem(text="Features", link="#features"), NavMenuItem(text="FAQ", link="#faq")],
        ),
        "hero": HeroSection(
            title=f"Welcome to {name}",
            subtitle="Your new page is ready. Open a section to edit it.",
            cta_text="Get started",
            cta_link="#features",
            image_prompt="A bright, modern workspace with soft morning light",
        ),
        "features": FeaturesSection(
            title="Features",
            subtitle="Everything you need to launch.",
            items=[
                FeatureItem(icon_name="Zap", title="Fast", description="Edit and preview instantly."),
                FeatureItem(icon_name="Layers", title="Simple", description="One section at a time."),
                FeatureItem(icon_name="Globe", title="Portable", description="Publish anywhere."),
            ],
        ),
        "faq": FAQSection(
            title="Questions",
            items=[FAQItem(question="Can I change this later?", answer="Yes, every section stays editable.")],
        ),
        "footer": FooterSection(
            copyright_text=f"© {name}",
            social_links=[SocialLink(network="twitter", url="https://twitter.com")],
        ),
    }
    return Page(name=name, section_order=list(sections), sections=sections)
