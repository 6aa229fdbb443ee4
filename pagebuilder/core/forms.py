"""Declarative edit-form model produced by the section registry.

The core never touches Qt: a form is a tree of :class:`FormField` and
:class:`ListField` values, each carrying its current value and callbacks bound
to the draft mutators. The UI layer walks the tree and builds widgets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple, Union

from .models import CustomForm, MediaFile, PageRef, Product


def _ignore(*_args, **_kwargs) -> None:
    return None


# Widget hints understood by ui.form_widgets
FIELD_KINDS = (
    "text",
    "textarea",
    "number",
    "select",
    "combo",
    "checkbox",
    "image",
    "color",
    "code",
    "icon",
    "multiselect",
    "notice",
)


@dataclass
class FormField:
    name: str
    label: str
    kind: str = "text"
    value: object = None
    on_change: Callable[[object], None] = _ignore
    options: List[Tuple[str, str]] = field(default_factory=list)
    placeholder: str = ""
    context: str = ""
    rows: int = 0
    # The form's layout depends on this value; re-render after a change.
    rebuild: bool = False
    on_pick: Optional[Callable[[], None]] = None


@dataclass
class ListEntry:
    index: int
    fields: List["FieldNode"]


@dataclass
class ListField:
    """A reorderable list of homogeneous items.

    ``reorder`` is the only way to change item order and always receives the
    complete new list.
    """

    name: str
    label: str
    entries: List[ListEntry]
    current: Callable[[], list]
    on_reorder: Callable[[list], None]
    on_add: Callable[[], None]
    on_remove: Callable[[int], None]
    add_text: str = "Add Item"
    header: List[FormField] = field(default_factory=list)
    kind: str = "list"

    def reorder(self, new_items: list) -> None:
        from . import lists

        lists.check_permutation(self.current(), new_items)
        self.on_reorder(list(new_items))

    def move(self, source: int, target: int) -> None:
        from . import lists

        self.on_reorder(lists.move(self.current(), source, target))

    def add(self) -> None:
        self.on_add()

    def remove(self, index: int) -> None:
        self.on_remove(index)


FieldNode = Union[FormField, ListField]


@dataclass
class EditForm:
    kind: str
    title: str
    fields: List[FieldNode] = field(default_factory=list)
    supported: bool = True
    message: str = ""

    def walk(self) -> Iterator[FieldNode]:
        """Yield every node depth first, list headers and entries included."""

        def _walk(nodes: List[FieldNode]) -> Iterator[FieldNode]:
            for node in nodes:
                yield node
                if isinstance(node, ListField):
                    yield from _walk(list(node.header))
                    for entry in node.entries:
                        yield from _walk(entry.fields)

        return _walk(self.fields)

    def field(self, name: str) -> FieldNode:
        for node in self.fields:
            if node.name == name:
                return node
        for node in self.walk():
            if node.name == name:
                return node
        raise KeyError(name)


@dataclass
class Catalogs:
    """Read-only data supplied when the editor opens."""

    media: List[MediaFile] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    custom_forms: List[CustomForm] = field(default_factory=list)
    section_keys: List[str] = field(default_factory=list)
    pages: List[PageRef] = field(default_factory=list)

    def form(self, form_id: str) -> Optional[CustomForm]:
        return next((f for f in self.custom_forms if f.id == form_id), None)

    def selected_products(self, ids: List[str]) -> List[Product]:
        by_id = {p.id: p for p in self.products}
        return [by_id[i] for i in ids if i in by_id]


@dataclass
class FormCollaborators:
    catalogs: Catalogs = field(default_factory=Catalogs)
    # Called with a setter; the picker later calls it with the chosen URL.
    pick_media: Callable[[Callable[[str], None]], None] = _ignore
