from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core import lists
from pagebuilder.core.forms import FormField
from pagebuilder.core.models import FAQItem, FooterSection


def test_move_returns_full_permutation() -> None:
    assert lists.move(["A", "B", "C"], 2, 0) == ["C", "A", "B"]
    assert lists.move(["A", "B", "C"], 0, 2) == ["B", "C", "A"]


def test_move_out_of_range_raises() -> None:
    with pytest.raises(IndexError):
        lists.move(["A"], 0, 1)


def test_remove_preserves_survivor_order() -> None:
    items = ["A", "B", "C"]
    assert lists.remove(items, 1) == ["A", "C"]
    assert items == ["A", "B", "C"]


def test_append_adds_default_at_end() -> None:
    assert lists.append([1, 2], 3) == [1, 2, 3]


def test_check_permutation_rejects_lost_or_duplicated_items() -> None:
    a, b, c = FAQItem("a"), FAQItem("b"), FAQItem("c")
    lists.check_permutation([a, b, c], [c, a, b])
    with pytest.raises(ValueError):
        lists.check_permutation([a, b, c], [c, a, a])
    with pytest.raises(ValueError):
        lists.check_permutation([a, b, c], [c, a])


def test_check_permutation_counts_equal_duplicates() -> None:
    lists.check_permutation(["x", "x", "y"], ["y", "x", "x"])
    with pytest.raises(ValueError):
        lists.check_permutation(["x", "y", "y"], ["x", "x", "y"])


def test_render_reorder_hands_full_list_to_callback() -> None:
    seen = []
    items = ["A", "B", "C"]
    node = lists.render(
        items,
        on_reorder=seen.append,
        render_item=lambda item, i: [FormField(name=f"items.{i}", label="Item", value=item)],
        on_add=lambda: None,
        on_remove=lambda i: None,
    )
    assert [entry.fields[0].value for entry in node.entries] == items
    node.reorder(["C", "A", "B"])
    node.move(0, 1)
    assert seen == [["C", "A", "B"], ["B", "A", "C"]]
    with pytest.raises(ValueError):
        node.reorder(["C", "A", "A"])


def test_header_fields_for_footer_use_copyright_only() -> None:
    changes = []
    header = lists.header_fields(
        FooterSection(copyright_text="(c) Me"),
        lambda name, value: changes.append((name, value)),
        title_field="copyright_text",
        subtitle_field=None,
    )
    assert [f.name for f in header] == ["copyright_text"]
    assert header[0].label == "Copyright Text"
    header[0].on_change("(c) You")
    assert changes == [("copyright_text", "(c) You")]
