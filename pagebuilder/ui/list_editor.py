"""Reorderable list editor widget."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from PyQt6 import QtCore, QtWidgets

from ..core.forms import FormField, ListField

if TYPE_CHECKING:
    from .form_widgets import FormBuilder


def _summary(node: ListField, index: int) -> str:
    entry = node.entries[index]
    for f in entry.fields:
        if isinstance(f, FormField) and isinstance(f.value, str) and f.value.strip():
            text = f.value.strip().splitlines()[0]
            return text if len(text) <= 60 else text[:57] + "…"
    return f"Item {index + 1}"


class ListEditorWidget(QtWidgets.QGroupBox):
    """Header fields, a drag-to-reorder overview and one panel per item.

    Drag and drop and the move buttons both hand the complete new list to
    :meth:`ListField.reorder`.
    """

    def __init__(self, node: ListField, builder: "FormBuilder", parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(node.label, parent)
        self.node = node
        self.builder = builder

        layout = QtWidgets.QVBoxLayout(self)
        layout.setSpacing(6)

        if node.header:
            builder.add_nodes(list(node.header), layout, self)

        self.order = QtWidgets.QListWidget(self)
        self.order.setDragDropMode(QtWidgets.QAbstractItemView.DragDropMode.InternalMove)
        self.order.setDefaultDropAction(QtCore.Qt.DropAction.MoveAction)
        for i in range(len(node.entries)):
            item = QtWidgets.QListWidgetItem(_summary(node, i), self.order)
            item.setData(QtCore.Qt.ItemDataRole.UserRole, i)
        self.order.setMaximumHeight(min(160, 26 * max(1, len(node.entries)) + 8))
        model = self.order.model()
        if model is not None:
            model.rowsMoved.connect(self._on_rows_moved)
        if node.entries:
            layout.addWidget(self.order)

        for entry in node.entries:
            layout.addWidget(self._entry_panel(entry.index, entry.fields))

        btn_add = QtWidgets.QPushButton(node.add_text, self)
        btn_add.clicked.connect(self._add)
        layout.addWidget(btn_add, 0, QtCore.Qt.AlignmentFlag.AlignLeft)

    def _entry_panel(self, index: int, fields: list) -> QtWidgets.QWidget:
        frame = QtWidgets.QFrame(self)
        frame.setFrameShape(QtWidgets.QFrame.Shape.StyledPanel)
        layout = QtWidgets.QVBoxLayout(frame)

        bar = QtWidgets.QHBoxLayout()
        bar.addWidget(QtWidgets.QLabel(f"#{index + 1}", frame))
        bar.addStretch(1)
        count = len(self.node.entries)
        btn_up = QtWidgets.QPushButton("▲", frame)
        btn_up.setEnabled(index > 0)
        btn_up.clicked.connect(lambda: self._move(index, index - 1))
        btn_down = QtWidgets.QPushButton("▼", frame)
        btn_down.setEnabled(index < count - 1)
        btn_down.clicked.connect(lambda: self._move(index, index + 1))
        btn_remove = QtWidgets.QPushButton("Remove", frame)
        btn_remove.clicked.connect(lambda: self._remove(index))
        for btn in (btn_up, btn_down, btn_remove):
            bar.addWidget(btn)
        layout.addLayout(bar)

        self.builder.add_nodes(list(fields), layout, frame)
        return frame

    # ---- actions ------------------------------------------------------
    def _on_rows_moved(self, *_args) -> None:
        order = []
        for row in range(self.order.count()):
            item = self.order.item(row)
            if item is not None:
                order.append(item.data(QtCore.Qt.ItemDataRole.UserRole))
        current = self.node.current()
        self.node.reorder([current[i] for i in order])
        self.builder.on_structure()

    def _move(self, source: int, target: int) -> None:
        self.node.move(source, target)
        self.builder.on_structure()

    def _add(self) -> None:
        self.node.add()
        self.builder.on_structure()

    def _remove(self, index: int) -> None:
        self.node.remove(index)
        self.builder.on_structure()
