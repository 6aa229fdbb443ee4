"""Media library picker dialog."""

from __future__ import annotations

from typing import Callable, List, Optional

from PyQt6 import QtCore, QtWidgets

from ..core.models import MediaFile


class MediaPickerDialog(QtWidgets.QDialog):
    def __init__(
        self,
        files: List[MediaFile],
        upload: Optional[Callable[[str], None]] = None,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Media Library")
        self.resize(520, 440)
        self.files = files
        self._upload = upload
        self.selected: Optional[MediaFile] = None

        layout = QtWidgets.QVBoxLayout(self)
        self.search = QtWidgets.QLineEdit(self)
        self.search.setPlaceholderText("Filter by name, description or keyword…")
        self.search.textChanged.connect(self.refresh)
        layout.addWidget(self.search)

        self.list = QtWidgets.QListWidget(self)
        self.list.itemDoubleClicked.connect(lambda _item: self.accept())
        layout.addWidget(self.list, 1)

        buttons = QtWidgets.QHBoxLayout()
        self.btn_upload = QtWidgets.QPushButton("Upload…", self)
        self.btn_upload.setEnabled(upload is not None)
        self.btn_upload.clicked.connect(self._on_upload)
        buttons.addWidget(self.btn_upload)
        buttons.addStretch(1)
        box = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.StandardButton.Ok | QtWidgets.QDialogButtonBox.StandardButton.Cancel,
            self,
        )
        box.accepted.connect(self.accept)
        box.rejected.connect(self.reject)
        buttons.addWidget(box)
        layout.addLayout(buttons)

        self.refresh()

    def refresh(self) -> None:
        needle = self.search.text().strip().lower()
        self.list.clear()
        for media in self.files:
            haystack = " ".join([media.name, media.description, *media.keywords]).lower()
            if needle and needle not in haystack:
                continue
            item = QtWidgets.QListWidgetItem(media.name or media.url[:60], self.list)
            item.setToolTip(media.description or media.url[:120])
            item.setData(QtCore.Qt.ItemDataRole.UserRole, media.id)

    def _on_upload(self) -> None:
        if self._upload is None:
            return
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Upload Image", "", "Images (*.png *.jpg *.jpeg *.gif *.webp *.svg)"
        )
        if path:
            self._upload(path)

    def accept(self) -> None:
        item = self.list.currentItem()
        if item is None:
            return
        media_id = item.data(QtCore.Qt.ItemDataRole.UserRole)
        self.selected = next((m for m in self.files if m.id == media_id), None)
        super().accept()
