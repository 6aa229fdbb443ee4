"""Modal section editor with Edit and Preview tabs."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, FrozenSet, List, Optional

from PyQt6 import QtCore, QtGui, QtWidgets
from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot
from PyQt6.QtWebEngineWidgets import QWebEngineView

from ..core.session import ZOOM_MAX, ZOOM_MIN, EditorSession, RegenerationTicket, SaveTicket, UploadTicket
from .form_widgets import FormBuilder
from .media_picker import MediaPickerDialog

logger = logging.getLogger(__name__)


class _AwaitableWorker(QObject):
    """Runs one awaitable on a worker thread with its own event loop."""

    finished = pyqtSignal(object, object)
    errored = pyqtSignal(object, object)

    def __init__(self, tag: object, factory: Callable[[], Awaitable[object]]) -> None:
        super().__init__()
        self.tag = tag
        self.factory = factory

    async def _run(self) -> object:
        return await self.factory()

    def run(self) -> None:
        try:
            result = asyncio.run(self._run())
        except Exception as exc:  # noqa: BLE001
            self.errored.emit(self.tag, exc)
            return
        self.finished.emit(self.tag, result)


class SectionEditorDialog(QtWidgets.QDialog):
    # Image slot keys of the section being regenerated; empty when idle.
    regenerating_changed = pyqtSignal(object)

    def __init__(
        self,
        session: EditorSession,
        debounce_ms: int = 400,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.session = session
        self.setWindowTitle(session.title)
        self.setModal(True)
        self.resize(1100, 780)

        self._threads: List[QThread] = []
        self._workers: List[_AwaitableWorker] = []
        self._form_widget: Optional[QtWidgets.QWidget] = None
        self._picker: Optional[MediaPickerDialog] = None
        self._busy_slots: FrozenSet[str] = frozenset()
        self._builder = FormBuilder(on_structure=self._schedule_rebuild, on_pick=self._open_media_picker)

        self._debounce = QtCore.QTimer(self)
        self._debounce.setInterval(debounce_ms)
        self._debounce.setSingleShot(True)
        self._debounce.timeout.connect(self.update_preview)
        self._unsubscribe = session.store.subscribe(lambda _draft: self._debounce.start())

        self._build_ui()
        self._bind_events()
        self._offer_restore()
        self.rebuild_form()
        self.update_preview()
        self._sync_state()

    # ------------------------------------------------------------------ UI --
    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        # Error banner
        self.banner = QtWidgets.QFrame(self)
        self.banner.setStyleSheet("QFrame { background: #fee2e2; border: 1px solid #fca5a5; border-radius: 6px; }")
        banner_layout = QtWidgets.QHBoxLayout(self.banner)
        self.banner_label = QtWidgets.QLabel(self.banner)
        self.banner_label.setWordWrap(True)
        self.btn_dismiss = QtWidgets.QPushButton("Dismiss", self.banner)
        banner_layout.addWidget(self.banner_label, 1)
        banner_layout.addWidget(self.btn_dismiss)
        self.banner.hide()
        layout.addWidget(self.banner)

        self.tabs = QtWidgets.QTabWidget(self)
        self.tabs.setDocumentMode(True)

        # Edit tab
        edit_tab = QtWidgets.QWidget(self.tabs)
        edit_layout = QtWidgets.QVBoxLayout(edit_tab)
        ai_row = QtWidgets.QHBoxLayout()
        self.instruction = QtWidgets.QLineEdit(edit_tab)
        self.instruction.setPlaceholderText("Describe a change, e.g. “make it friendlier and add a fourth item”")
        self.btn_ai = QtWidgets.QPushButton("Update with AI", edit_tab)
        ai_row.addWidget(self.instruction, 1)
        ai_row.addWidget(self.btn_ai)
        edit_layout.addLayout(ai_row)
        self.scroll = QtWidgets.QScrollArea(edit_tab)
        self.scroll.setWidgetResizable(True)
        edit_layout.addWidget(self.scroll, 1)
        self.tabs.addTab(edit_tab, "Edit")

        # Preview tab
        preview_tab = QtWidgets.QWidget(self.tabs)
        preview_layout = QtWidgets.QVBoxLayout(preview_tab)
        zoom_row = QtWidgets.QHBoxLayout()
        self.zoom = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal, preview_tab)
        self.zoom.setRange(ZOOM_MIN, ZOOM_MAX)
        self.zoom.setValue(self.session.zoom)
        self.zoom_label = QtWidgets.QLabel(f"{self.session.zoom}%", preview_tab)
        zoom_row.addWidget(QtWidgets.QLabel("Zoom", preview_tab))
        zoom_row.addWidget(self.zoom, 1)
        zoom_row.addWidget(self.zoom_label)
        preview_layout.addLayout(zoom_row)
        self.preview = QWebEngineView(preview_tab)
        self.preview.setZoomFactor(self.session.zoom / 100)
        preview_layout.addWidget(self.preview, 1)
        self.tabs.addTab(preview_tab, "Preview")

        layout.addWidget(self.tabs, 1)

        buttons = QtWidgets.QHBoxLayout()
        self.status = QtWidgets.QLabel(self)
        self.btn_cancel = QtWidgets.QPushButton("Cancel", self)
        self.btn_save = QtWidgets.QPushButton("Save & Close", self)
        self.btn_save.setDefault(True)
        buttons.addWidget(self.status, 1)
        buttons.addWidget(self.btn_cancel)
        buttons.addWidget(self.btn_save)
        layout.addLayout(buttons)

    def _bind_events(self) -> None:
        self.btn_dismiss.clicked.connect(self._dismiss_error)
        self.instruction.textChanged.connect(lambda _text: self._sync_state())
        self.instruction.returnPressed.connect(self.regenerate)
        self.btn_ai.clicked.connect(self.regenerate)
        self.zoom.valueChanged.connect(self._on_zoom)
        self.tabs.currentChanged.connect(self._on_tab_changed)
        self.btn_cancel.clicked.connect(self.reject)
        self.btn_save.clicked.connect(self.save)

    # ------------------------------------------------------------- Form/preview --
    def rebuild_form(self) -> None:
        if self.session.closed:
            return
        bar = self.scroll.verticalScrollBar()
        position = bar.value() if bar is not None else 0
        widget = self._builder.build(self.session.edit_form(), self.scroll)
        self.scroll.setWidget(widget)
        self._form_widget = widget
        if bar is not None:
            QtCore.QTimer.singleShot(0, lambda: bar.setValue(position))

    def _schedule_rebuild(self) -> None:
        # The emitting widget belongs to the form being replaced.
        QtCore.QTimer.singleShot(0, self.rebuild_form)
        self._debounce.start()

    def update_preview(self) -> None:
        if self.session.closed:
            return
        self.preview.setHtml(self.session.preview_html(), QtCore.QUrl("about:blank"))

    def _on_zoom(self, value: int) -> None:
        zoom = self.session.set_zoom(value)
        self.zoom_label.setText(f"{zoom}%")
        self.preview.setZoomFactor(zoom / 100)

    def _on_tab_changed(self, index: int) -> None:
        self.session.show_tab("preview" if index == 1 else "edit")
        if index == 1:
            self.update_preview()

    # ---------------------------------------------------------------- Media --
    def _open_media_picker(self) -> None:
        if not self.session.media_target_open:
            return
        upload = self.session.host.collaborators.upload
        dialog = MediaPickerDialog(
            self.session.catalogs.media,
            upload=self._upload if upload is not None else None,
            parent=self,
        )
        self._picker = dialog
        accepted = dialog.exec()
        self._picker = None
        if accepted == QtWidgets.QDialog.DialogCode.Accepted and dialog.selected is not None:
            if self.session.select_media(dialog.selected):
                self._schedule_rebuild()
        else:
            self.session.close_media_library()

    def _upload(self, path: str) -> None:
        ticket = self.session.begin_upload(path)
        if ticket is None:
            self._sync_state()
            return
        upload = self.session.host.collaborators.upload
        self.status.setText("Uploading…")
        self._run(ticket, lambda: upload(ticket.path))

    # ------------------------------------------------------------ Actions --
    def regenerate(self) -> None:
        if not self.session.can_regenerate(self.instruction.text()):
            return
        ticket = self.session.begin_regenerate(self.instruction.text())
        self._sync_state()
        if ticket is None:
            return
        self.status.setText("Updating with AI…")
        self._announce_regenerating()
        self._run(ticket, lambda: self.session.gateway.call(ticket.request))

    def save(self) -> None:
        ticket = self.session.begin_save()
        self._sync_state()
        if ticket is None:
            return
        self.status.setText("Saving…")
        save = self.session.host.collaborators.save
        self._run(ticket, lambda: save(self.session.section_key, ticket.snapshot))

    def _run(self, tag: object, factory: Callable[[], Awaitable[object]]) -> None:
        thread = QThread(self)
        worker = _AwaitableWorker(tag, factory)
        worker.moveToThread(thread)

        def cleanup() -> None:
            if thread in self._threads:
                self._threads.remove(thread)
            if worker in self._workers:
                self._workers.remove(worker)
            worker.deleteLater()
            thread.deleteLater()

        worker.finished.connect(self._on_worker_finished)
        worker.errored.connect(self._on_worker_errored)
        worker.finished.connect(thread.quit)
        worker.errored.connect(thread.quit)
        thread.finished.connect(cleanup)
        thread.started.connect(worker.run)
        self._threads.append(thread)
        self._workers.append(worker)
        thread.start()

    @pyqtSlot(object, object)
    def _on_worker_finished(self, tag: object, result: object) -> None:
        self._complete(tag, result=result)

    @pyqtSlot(object, object)
    def _on_worker_errored(self, tag: object, exc: object) -> None:
        self._complete(tag, exc=exc)

    def _complete(self, tag: object, result: object = None, exc: object = None) -> None:
        self.status.clear()
        if isinstance(tag, RegenerationTicket):
            outcome = self.session.complete_regenerate(tag, response=result, exc=exc)
            self._announce_regenerating()
            if outcome.ok:
                self.instruction.clear()
                self.rebuild_form()
                self.update_preview()
        elif isinstance(tag, SaveTicket):
            outcome = self.session.complete_save(tag, exc=exc)
            if outcome.ok:
                super().accept()
                return
        elif isinstance(tag, UploadTicket):
            outcome = self.session.complete_upload(tag, media=result, exc=exc)
            if outcome.ok:
                self.status.setText("Uploaded.")
            if self._picker is not None:
                self._picker.refresh()
        self._sync_state()

    # ---------------------------------------------------------------- State --
    def _sync_state(self) -> None:
        error = self.session.error
        self.banner_label.setText(error or "")
        self.banner.setVisible(bool(error))
        self.btn_ai.setEnabled(self.session.can_regenerate(self.instruction.text()))
        self.btn_save.setEnabled(self.session.can_save())
        self.scroll.setEnabled(self.session.can_save())
        self.instruction.setEnabled(not self.session.gateway.pending)

    def _announce_regenerating(self) -> None:
        slots = self.session.regenerating_slots()
        if slots != self._busy_slots:
            self._busy_slots = slots
            self.regenerating_changed.emit(slots)

    def _dismiss_error(self) -> None:
        self.session.dismiss_error()
        self._sync_state()

    def _offer_restore(self) -> None:
        if not self.session.has_stash():
            return
        answer = QtWidgets.QMessageBox.question(
            self.parentWidget() or self,
            "Unsaved changes",
            "This section has unsaved changes from an earlier edit. Restore them?",
        )
        if answer == QtWidgets.QMessageBox.StandardButton.Yes:
            self.session.restore_stash()

    def _stash_unsaved(self) -> None:
        if not self.session.closed and self.session.is_dirty() and self.session.stash_draft():
            logger.info("Stashed unsaved draft of %s", self.session.section_key)

    def keyPressEvent(self, event: QtGui.QKeyEvent) -> None:  # noqa: N802 (Qt override)
        if event.key() == QtCore.Qt.Key.Key_Escape:
            self._stash_unsaved()
            self.session.handle_key("Escape")
            super().reject()
            return
        super().keyPressEvent(event)

    def reject(self) -> None:
        self._stash_unsaved()
        self.session.cancel()
        super().reject()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802 (Qt override)
        self._stash_unsaved()
        self.session.cancel()
        super().closeEvent(event)

    def done(self, result: int) -> None:
        self._debounce.stop()
        self._unsubscribe()
        self._announce_regenerating()
        super().done(result)
