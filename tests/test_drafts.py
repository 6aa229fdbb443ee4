from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagebuilder.core.drafts import DraftState, DraftStore
from pagebuilder.core.errors import DraftStateError
from pagebuilder.core.models import CTASection, FAQItem, FAQSection


def _seeded() -> tuple[FAQSection, DraftStore]:
    committed = FAQSection(title="FAQ", items=[FAQItem("Q1", "A1")])
    store = DraftStore()
    store.seed(committed)
    return committed, store


def test_seed_copies_committed_section() -> None:
    committed, store = _seeded()
    assert store.draft == committed
    assert store.draft is not committed
    store.set_item_field(0, "question", "Changed")
    assert committed.items[0].question == "Q1"
    assert store.draft.items[0].question == "Changed"


def test_seed_twice_yields_equal_drafts_and_new_epoch() -> None:
    committed, store = _seeded()
    first, epoch = store.draft, store.epoch
    store.seed(committed)
    assert store.draft == first
    assert store.epoch == epoch + 1


def test_mutations_replace_the_draft_object() -> None:
    _, store = _seeded()
    before = store.draft
    store.set_field("title", "Help")
    assert store.draft is not before
    assert before.title == "FAQ"


def test_unknown_field_is_rejected() -> None:
    _, store = _seeded()
    with pytest.raises(DraftStateError):
        store.set_field("price", 10)
    with pytest.raises(DraftStateError):
        store.set_item_field(5, "question", "x")
    with pytest.raises(DraftStateError):
        store.set_item_field(0, "nope", "x")


def test_mutations_require_an_open_draft() -> None:
    store = DraftStore()
    with pytest.raises(DraftStateError):
        store.set_field("title", "x")
    _, store = _seeded()
    store.discard()
    assert store.draft is None
    assert store.state == DraftState.DISCARDED
    with pytest.raises(DraftStateError):
        store.set_field("title", "x")


def test_replace_keeps_the_kind() -> None:
    _, store = _seeded()
    store.replace(FAQSection(title="New"))
    assert store.draft == FAQSection(title="New")
    with pytest.raises(DraftStateError):
        store.replace(CTASection(title="Nope"))


def test_save_snapshot_is_detached_and_blocks_edits() -> None:
    _, store = _seeded()
    snapshot = store.begin_save()
    assert store.state == DraftState.SAVING
    assert snapshot == store.draft and snapshot is not store.draft
    with pytest.raises(DraftStateError):
        store.set_field("title", "late edit")


def test_failed_save_keeps_the_draft() -> None:
    _, store = _seeded()
    store.set_field("title", "Edited")
    store.begin_save()
    store.end_save(error="disk full")
    assert store.state == DraftState.EDITING
    assert store.error == "disk full"
    assert store.draft.title == "Edited"


def test_successful_save_commits_and_drops_the_draft() -> None:
    _, store = _seeded()
    store.begin_save()
    store.end_save()
    assert store.state == DraftState.COMMITTED
    assert store.draft is None


def test_regeneration_result_replaces_wholesale() -> None:
    _, store = _seeded()
    store.set_field("subtitle", "Old subtitle")
    store.begin_regeneration()
    assert store.state == DraftState.REGENERATING
    store.end_regeneration(FAQSection(title="AI", items=[FAQItem("x", "y")]))
    assert store.state == DraftState.EDITING
    assert store.draft == FAQSection(title="AI", items=[FAQItem("x", "y")])


def test_failed_regeneration_keeps_the_draft() -> None:
    _, store = _seeded()
    store.begin_regeneration()
    store.end_regeneration(error="busy")
    assert store.draft.title == "FAQ"
    assert store.error == "busy"


def test_subscribers_see_every_change_until_unsubscribed() -> None:
    _, store = _seeded()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.set_field("title", "A")
    store.set_field("title", "B")
    unsubscribe()
    store.set_field("title", "C")
    assert [s.title for s in seen] == ["A", "B"]
