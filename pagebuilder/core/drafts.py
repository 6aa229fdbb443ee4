"""The working copy of one section while its editor is open."""

from __future__ import annotations

import copy
import dataclasses
import logging
from enum import Enum
from typing import Callable, List, Optional

from .errors import DraftStateError
from .models import Section

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[Section]], None]


class DraftState(str, Enum):
    UNINITIALIZED = "uninitialized"
    EDITING = "editing"
    REGENERATING = "regenerating"
    SAVING = "saving"
    COMMITTED = "committed"
    DISCARDED = "discarded"


MUTABLE_STATES = (DraftState.EDITING, DraftState.REGENERATING)


class DraftStore:
    """Holds a deep copy of a committed section and applies edits to it.

    Every mutation replaces the draft with a new object, so previews and
    snapshots taken earlier never change underneath their holders. ``epoch``
    is bumped each time the store is seeded or discarded; late collaborator
    results compare it to decide whether they still apply.
    """

    def __init__(self) -> None:
        self._draft: Optional[Section] = None
        self.state = DraftState.UNINITIALIZED
        self.error: Optional[str] = None
        self.epoch = 0
        self._listeners: List[Listener] = []

    # ---- observation --------------------------------------------------
    @property
    def draft(self) -> Optional[Section]:
        return self._draft

    @property
    def kind(self) -> str:
        return self._draft.section_kind if self._draft is not None else ""

    @property
    def editable(self) -> bool:
        return self._draft is not None and self.state in MUTABLE_STATES

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._draft)

    # ---- lifecycle ----------------------------------------------------
    def seed(self, section: Section) -> Section:
        self._draft = copy.deepcopy(section)
        self.state = DraftState.EDITING
        self.error = None
        self.epoch += 1
        self._notify()
        return self._draft

    def discard(self) -> None:
        self._draft = None
        self.state = DraftState.DISCARDED
        self.error = None
        self.epoch += 1
        self._notify()

    def clear_error(self) -> None:
        self.error = None

    def fail(self, message: str) -> None:
        self.error = message
        self._notify()

    # ---- mutations ----------------------------------------------------
    def _require_editable(self) -> Section:
        if self._draft is None or self.state not in MUTABLE_STATES:
            raise DraftStateError(f"draft cannot be edited while {self.state.value}")
        return self._draft

    def _require_field(self, draft: Section, name: str) -> None:
        if name not in draft.field_names():
            raise DraftStateError(f"{draft.section_kind!r} has no field {name!r}")

    def _commit(self, new: Section) -> None:
        self._draft = new
        self._notify()

    def set_field(self, name: str, value: object) -> None:
        draft = self._require_editable()
        self._require_field(draft, name)
        self._commit(dataclasses.replace(draft, **{name: value}))

    def set_items(self, items: list, field: str = "items") -> None:
        """Replace the whole list ``field``; used for add, remove and reorder."""
        draft = self._require_editable()
        self._require_field(draft, field)
        self._commit(dataclasses.replace(draft, **{field: list(items)}))

    def set_item_field(self, index: int, name: str, value: object, field: str = "items") -> None:
        draft = self._require_editable()
        self._require_field(draft, field)
        items = list(getattr(draft, field))
        if not 0 <= index < len(items):
            raise DraftStateError(f"no item {index} in {field!r}")
        item = items[index]
        if name not in {f.name for f in dataclasses.fields(item)}:
            raise DraftStateError(f"{type(item).__name__} has no field {name!r}")
        items[index] = dataclasses.replace(item, **{name: value})
        self._commit(dataclasses.replace(draft, **{field: items}))

    def replace(self, section: Section) -> None:
        """Swap in a whole new section of the same kind."""
        draft = self._require_editable()
        if section.section_kind != draft.section_kind:
            raise DraftStateError(
                f"cannot replace a {draft.section_kind!r} draft with a {section.section_kind!r} section"
            )
        self._commit(copy.deepcopy(section))

    # ---- collaborator transitions ------------------------------------
    def begin_regeneration(self) -> None:
        if self._draft is None or self.state != DraftState.EDITING:
            raise DraftStateError(f"cannot regenerate while {self.state.value}")
        self.state = DraftState.REGENERATING
        self.error = None
        self._notify()

    def end_regeneration(self, section: Optional[Section] = None, error: Optional[str] = None) -> None:
        if self.state != DraftState.REGENERATING:
            raise DraftStateError(f"no regeneration in progress ({self.state.value})")
        if section is not None:
            self.replace(section)
        self.state = DraftState.EDITING
        self.error = error
        self._notify()

    def begin_save(self) -> Section:
        """Move to SAVING and return the snapshot that must be persisted."""
        if self._draft is None or self.state != DraftState.EDITING:
            raise DraftStateError(f"cannot save while {self.state.value}")
        self.state = DraftState.SAVING
        self.error = None
        self._notify()
        return copy.deepcopy(self._draft)

    def end_save(self, error: Optional[str] = None) -> None:
        if self.state != DraftState.SAVING:
            raise DraftStateError(f"no save in progress ({self.state.value})")
        if error is not None:
            self.state = DraftState.EDITING
            self.error = error
        else:
            self.state = DraftState.COMMITTED
            self._draft = None
        self._notify()
