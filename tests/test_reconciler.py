"""Tests for sync.reconciler: the greedy alignment planner."""

from notion_docs_sync.blocks.comparator import BlockComparator
from notion_docs_sync.sync.reconciler import (
    EditKind,
    EditOperation,
    plan_reconciliation,
)

DOC = "doc-1"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _para(text: str) -> dict:
    return {
        "type": "paragraph",
        "paragraph": {"rich_text": [{"type": "text", "text": {"content": text}}]},
    }


def _existing(text: str, block_id: str | None = None) -> dict:
    block = _para(text)
    block["id"] = block_id or text.lower()
    block["object"] = "block"
    block["paragraph"]["rich_text"][0]["plain_text"] = text
    return block


def _plan(existing, rendered):
    return plan_reconciliation(DOC, existing, rendered, BlockComparator().compare)


def _summary(operations: list[EditOperation]) -> list[tuple]:
    """Reduce operations to (kind, id-or-anchor, texts) tuples."""
    out = []
    for op in operations:
        if op.kind == EditKind.INSERT:
            texts = [b["paragraph"]["rich_text"][0]["text"]["content"] for b in op.blocks]
            out.append(("insert", op.anchor_id, texts))
        else:
            out.append((op.kind.value, op.block_id))
    return out


class TestPlanReconciliation:
    """Tests for plan_reconciliation()."""

    def test_identical_sequences_only_match(self):
        existing = [_existing("A"), _existing("B"), _existing("C")]
        rendered = [_para("A"), _para("B"), _para("C")]
        assert _summary(_plan(existing, rendered)) == [
            ("match", "a"),
            ("match", "b"),
            ("match", "c"),
        ]

    def test_pure_append_anchored_at_document(self):
        rendered = [_para("A"), _para("B"), _para("C")]
        assert _summary(_plan([], rendered)) == [
            ("insert", DOC, ["A", "B", "C"]),
        ]

    def test_pure_deletion_in_order(self):
        existing = [_existing("X"), _existing("Y")]
        assert _summary(_plan(existing, [])) == [
            ("delete", "x"),
            ("delete", "y"),
        ]

    def test_both_empty(self):
        assert _plan([], []) == []

    def test_reorder_keeps_later_match(self):
        """[A, B] -> [B, A]: B is queued for A, A matches, old B is deleted."""
        existing = [_existing("A"), _existing("B")]
        rendered = [_para("B"), _para("A")]
        assert _summary(_plan(existing, rendered)) == [
            ("insert", DOC, ["B"]),
            ("match", "a"),
            ("delete", "b"),
        ]

    def test_changed_middle_block(self):
        existing = [_existing("A"), _existing("X"), _existing("C")]
        rendered = [_para("A"), _para("B"), _para("C")]
        assert _summary(_plan(existing, rendered)) == [
            ("match", "a"),
            ("delete", "x"),
            ("insert", "a", ["B"]),
            ("match", "c"),
        ]

    def test_insert_before_first_match(self):
        existing = [_existing("B")]
        rendered = [_para("A"), _para("B")]
        assert _summary(_plan(existing, rendered)) == [
            ("insert", DOC, ["A"]),
            ("match", "b"),
        ]

    def test_append_after_last_match(self):
        existing = [_existing("A")]
        rendered = [_para("A"), _para("B"), _para("C")]
        assert _summary(_plan(existing, rendered)) == [
            ("match", "a"),
            ("insert", "a", ["B", "C"]),
        ]

    def test_trailing_blocks_deleted(self):
        existing = [_existing("A"), _existing("B"), _existing("C")]
        rendered = [_para("A")]
        assert _summary(_plan(existing, rendered)) == [
            ("match", "a"),
            ("delete", "b"),
            ("delete", "c"),
        ]

    def test_scan_exhausting_existing_queues_block(self):
        """Deleting every remote block without a match still inserts the block."""
        existing = [_existing("X")]
        rendered = [_para("A")]
        assert _summary(_plan(existing, rendered)) == [
            ("delete", "x"),
            ("insert", DOC, ["A"]),
        ]

    def test_scan_exhausting_existing_mid_sequence(self):
        existing = [_existing("A"), _existing("X"), _existing("Y")]
        rendered = [_para("A"), _para("B"), _para("C")]
        assert _summary(_plan(existing, rendered)) == [
            ("match", "a"),
            ("delete", "x"),
            ("delete", "y"),
            ("insert", "a", ["B", "C"]),
        ]

    def test_duplicate_rendered_blocks(self):
        existing = [_existing("A", "a1")]
        rendered = [_para("A"), _para("A")]
        assert _summary(_plan(existing, rendered)) == [
            ("match", "a1"),
            ("insert", "a1", ["A"]),
        ]

    def test_indices_recorded(self):
        existing = [_existing("A"), _existing("X")]
        rendered = [_para("A"), _para("B")]
        operations = _plan(existing, rendered)
        match, delete, insert = operations
        assert match.rendered_indices == (0,)
        assert match.existing_index == 0
        assert delete.existing_index == 1
        assert insert.rendered_indices == (1,)

    def test_inputs_not_modified(self):
        existing = [_existing("A")]
        rendered = [_para("B")]
        before = (repr(existing), repr(rendered))
        _plan(existing, rendered)
        assert (repr(existing), repr(rendered)) == before

    def test_custom_matcher(self):
        calls = []

        def never(rendered, remote):
            calls.append((rendered, remote))
            return False

        operations = plan_reconciliation(
            DOC, [_existing("A")], [_para("A")], never
        )
        assert [op.kind for op in operations] == [EditKind.DELETE, EditKind.INSERT]
        assert calls
