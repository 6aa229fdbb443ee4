"""Qt widgets for the declarative edit forms in :mod:`pagebuilder.core.forms`."""

from __future__ import annotations

from typing import Callable, List, Optional

from PyQt6 import QtCore, QtGui, QtWidgets

from ..core.forms import EditForm, FieldNode, FormField, ListField

# A few common Lucide icon names for completion; any name is accepted.
LUCIDE_ICONS = [
    "BarChart", "Bell", "BookOpen", "Calendar", "Check", "Circle", "Clock", "Cloud", "Code",
    "CreditCard", "Globe", "Heart", "Home", "Layers", "Lock", "Mail", "MapPin", "MessageCircle",
    "Phone", "Rocket", "Search", "Settings", "ShieldCheck", "ShoppingCart", "Smile", "Sparkles",
    "Star", "Target", "ThumbsUp", "TrendingUp", "Truck", "User", "Users", "Zap",
]


class FormBuilder:
    """Builds widgets for an :class:`EditForm`.

    ``on_structure`` runs after changes that need the form rebuilt (list
    actions, branching selects); ``on_pick`` after an image field asked for
    the media library. Plain value edits only reach the draft store,
    whose listeners refresh the preview.
    """

    def __init__(
        self,
        on_structure: Callable[[], None],
        on_pick: Callable[[], None],
    ) -> None:
        self.on_structure = on_structure
        self.on_pick = on_pick

    def build(self, form: EditForm, parent: Optional[QtWidgets.QWidget] = None) -> QtWidgets.QWidget:
        container = QtWidgets.QWidget(parent)
        layout = QtWidgets.QVBoxLayout(container)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(8)
        if not form.supported:
            notice = QtWidgets.QLabel(form.message, container)
            notice.setWordWrap(True)
            notice.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
            layout.addWidget(notice)
        else:
            self.add_nodes(form.fields, layout, container)
        layout.addStretch(1)
        return container

    def add_nodes(self, nodes: List[FieldNode], layout: QtWidgets.QVBoxLayout, parent: QtWidgets.QWidget) -> None:
        form_layout: Optional[QtWidgets.QFormLayout] = None
        for node in nodes:
            if isinstance(node, ListField):
                from .list_editor import ListEditorWidget

                form_layout = None
                layout.addWidget(ListEditorWidget(node, self, parent))
                continue
            if form_layout is None:
                form_layout = QtWidgets.QFormLayout()
                form_layout.setFieldGrowthPolicy(QtWidgets.QFormLayout.FieldGrowthPolicy.ExpandingFieldsGrow)
                layout.addLayout(form_layout)
            widget = self.field_widget(node, parent)
            if node.kind == "checkbox" or node.kind == "notice":
                form_layout.addRow(widget)
            else:
                form_layout.addRow(node.label, widget)

    # ---- single fields -------------------------------------------------
    def _changed(self, node: FormField, value: object) -> None:
        node.on_change(value)
        if node.rebuild:
            self.on_structure()

    def field_widget(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        builder = getattr(self, f"_w_{node.kind}", None) or self._w_text
        widget = builder(node, parent)
        if node.context:
            widget.setToolTip(node.context)
        widget.setObjectName(node.name)
        return widget

    def _w_text(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        edit = QtWidgets.QLineEdit(str(node.value or ""), parent)
        edit.setPlaceholderText(node.placeholder)
        edit.textChanged.connect(lambda text: self._changed(node, text))
        return edit

    def _w_textarea(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        edit = QtWidgets.QPlainTextEdit(str(node.value or ""), parent)
        edit.setPlaceholderText(node.placeholder)
        lines = node.rows or 3
        edit.setFixedHeight(edit.fontMetrics().lineSpacing() * lines + 16)
        edit.textChanged.connect(lambda: self._changed(node, edit.toPlainText()))
        return edit

    def _w_code(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        edit = self._w_textarea(node, parent)
        edit.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.SystemFont.FixedFont))
        return edit

    def _w_number(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        if isinstance(node.value, float):
            spin: QtWidgets.QAbstractSpinBox = QtWidgets.QDoubleSpinBox(parent)
            spin.setDecimals(2)
            spin.setRange(0, 1_000_000)
            spin.setValue(float(node.value))
        else:
            spin = QtWidgets.QSpinBox(parent)
            spin.setRange(0, 10_000)
            spin.setValue(int(node.value or 0))
        spin.valueChanged.connect(lambda value: self._changed(node, value))
        return spin

    def _w_select(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        combo = QtWidgets.QComboBox(parent)
        for value, label in node.options:
            combo.addItem(label, value)
        index = combo.findData(node.value)
        if index >= 0:
            combo.setCurrentIndex(index)
        combo.currentIndexChanged.connect(lambda i: self._changed(node, combo.itemData(i)))
        return combo

    def _w_combo(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        combo = QtWidgets.QComboBox(parent)
        combo.setEditable(True)
        for value, label in node.options:
            combo.addItem(value, value)
            combo.setItemData(combo.count() - 1, label, QtCore.Qt.ItemDataRole.ToolTipRole)
        combo.setEditText(str(node.value or ""))
        combo.editTextChanged.connect(lambda text: self._changed(node, text))
        return combo

    def _w_checkbox(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        box = QtWidgets.QCheckBox(node.label, parent)
        box.setChecked(bool(node.value))
        box.toggled.connect(lambda checked: self._changed(node, checked))
        return box

    def _w_image(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        row = QtWidgets.QWidget(parent)
        layout = QtWidgets.QHBoxLayout(row)
        layout.setContentsMargins(0, 0, 0, 0)
        edit = QtWidgets.QLineEdit(str(node.value or ""), row)
        edit.setPlaceholderText(node.placeholder)
        edit.textChanged.connect(lambda text: self._changed(node, text))
        layout.addWidget(edit, 1)
        if node.on_pick is not None:
            btn = QtWidgets.QPushButton("Library…", row)

            def pick() -> None:
                node.on_pick()
                self.on_pick()

            btn.clicked.connect(pick)
            layout.addWidget(btn)
        return row

    def _w_color(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        row = QtWidgets.QWidget(parent)
        layout = QtWidgets.QHBoxLayout(row)
        layout.setContentsMargins(0, 0, 0, 0)
        edit = QtWidgets.QLineEdit(str(node.value or ""), row)
        edit.setPlaceholderText("#4f46e5")
        edit.textChanged.connect(lambda text: self._changed(node, text))
        btn = QtWidgets.QPushButton("Pick…", row)

        def choose() -> None:
            initial = QtGui.QColor(edit.text()) if edit.text() else QtGui.QColor("#ffffff")
            color = QtWidgets.QColorDialog.getColor(initial, row, node.label)
            if color.isValid():
                edit.setText(color.name())

        btn.clicked.connect(choose)
        layout.addWidget(edit, 1)
        layout.addWidget(btn)
        return row

    def _w_icon(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        edit = self._w_text(node, parent)
        completer = QtWidgets.QCompleter(LUCIDE_ICONS, edit)
        completer.setCaseSensitivity(QtCore.Qt.CaseSensitivity.CaseInsensitive)
        edit.setCompleter(completer)
        return edit

    def _w_multiselect(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        view = QtWidgets.QListWidget(parent)
        selected = set(node.value or [])
        for value, label in node.options:
            item = QtWidgets.QListWidgetItem(label, view)
            item.setData(QtCore.Qt.ItemDataRole.UserRole, value)
            item.setFlags(item.flags() | QtCore.Qt.ItemFlag.ItemIsUserCheckable)
            item.setCheckState(
                QtCore.Qt.CheckState.Checked if value in selected else QtCore.Qt.CheckState.Unchecked
            )

        def collect(_item: QtWidgets.QListWidgetItem) -> None:
            values = []
            for row in range(view.count()):
                it = view.item(row)
                if it is not None and it.checkState() == QtCore.Qt.CheckState.Checked:
                    values.append(it.data(QtCore.Qt.ItemDataRole.UserRole))
            self._changed(node, values)

        view.itemChanged.connect(collect)
        view.setMaximumHeight(160)
        return view

    def _w_notice(self, node: FormField, parent: QtWidgets.QWidget) -> QtWidgets.QWidget:
        label = QtWidgets.QLabel(str(node.value or node.label), parent)
        label.setWordWrap(True)
        label.setStyleSheet("color: #64748b;")
        return label
