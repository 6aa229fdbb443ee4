"""Reorder/add/remove primitives shared by every list-shaped section.

All helpers return new lists and never modify their input. The editor is
agnostic of item schemas: default items come from the caller.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, TypeVar

from .forms import FieldNode, FormField, ListEntry, ListField

T = TypeVar("T")


def move(items: Sequence[T], source: int, target: int) -> List[T]:
    """Return the full list with the item at ``source`` moved to ``target``."""

    count = len(items)
    if not (0 <= source < count) or not (0 <= target < count):
        raise IndexError(f"cannot move item {source} to {target} in a list of {count}")
    result = list(items)
    item = result.pop(source)
    result.insert(target, item)
    return result


def append(items: Sequence[T], item: T) -> List[T]:
    return [*items, item]


def remove(items: Sequence[T], index: int) -> List[T]:
    if not 0 <= index < len(items):
        raise IndexError(f"no item at index {index}")
    return [item for i, item in enumerate(items) if i != index]


def replace_at(items: Sequence[T], index: int, item: T) -> List[T]:
    if not 0 <= index < len(items):
        raise IndexError(f"no item at index {index}")
    result = list(items)
    result[index] = item
    return result


def check_permutation(original: Sequence[T], reordered: Sequence[T]) -> None:
    """Raise ``ValueError`` unless ``reordered`` holds exactly the items of ``original``.

    Items are matched by identity first, then by equality, so duplicates of
    equal value are counted rather than collapsed.
    """

    if len(original) != len(reordered):
        raise ValueError(f"reorder changed the item count from {len(original)} to {len(reordered)}")
    remaining = list(original)
    for item in reordered:
        for i, candidate in enumerate(remaining):
            if candidate is item:
                del remaining[i]
                break
        else:
            for i, candidate in enumerate(remaining):
                if candidate == item:
                    del remaining[i]
                    break
            else:
                raise ValueError(f"reorder introduced an unknown item: {item!r}")


def header_fields(
    draft: object,
    set_field: Callable[[str, object], None],
    title_field: Optional[str] = "title",
    subtitle_field: Optional[str] = "subtitle",
    context: str = "",
) -> List[FormField]:
    """Title/subtitle fields for the list header, for the names the draft actually has."""

    result: List[FormField] = []
    if title_field and hasattr(draft, title_field):
        label = "Copyright Text" if title_field == "copyright_text" else "Title"
        result.append(
            FormField(
                name=title_field,
                label=label,
                value=getattr(draft, title_field),
                on_change=lambda v, n=title_field: set_field(n, v),
                context=f"{context} section {label.lower()}".strip(),
            )
        )
    if subtitle_field and hasattr(draft, subtitle_field):
        result.append(
            FormField(
                name=subtitle_field,
                label="Subtitle",
                kind="textarea",
                rows=2,
                value=getattr(draft, subtitle_field),
                on_change=lambda v, n=subtitle_field: set_field(n, v),
                context=f"{context} section subtitle".strip(),
            )
        )
    return result


def render(
    items: Sequence[T],
    on_reorder: Callable[[List[T]], None],
    render_item: Callable[[T, int], List[FieldNode]],
    on_add: Callable[[], None],
    on_remove: Callable[[int], None],
    *,
    name: str = "items",
    label: str = "Items",
    add_text: str = "Add Item",
    header: Optional[List[FormField]] = None,
    current: Optional[Callable[[], Sequence[T]]] = None,
) -> ListField:
    """Build the list editor node for ``items``.

    ``current`` returns the live list at action time; it defaults to the
    snapshot passed in ``items``.
    """

    snapshot = list(items)
    return ListField(
        name=name,
        label=label,
        entries=[ListEntry(index=i, fields=render_item(item, i)) for i, item in enumerate(snapshot)],
        current=(lambda: list(current())) if current is not None else (lambda: list(snapshot)),
        on_reorder=on_reorder,
        on_add=on_add,
        on_remove=on_remove,
        add_text=add_text,
        header=list(header or []),
    )
