"""Greedy alignment of rendered blocks against existing remote blocks.

``plan_reconciliation`` walks the rendered sequence once with a cursor
into the existing sequence that only ever moves forward:

- a rendered block equal to the block under the cursor is a *match*: any
  queued blocks are inserted after the previous anchor, and the matched
  block becomes the new anchor;
- a remote block under the cursor that no later rendered block matches is
  *deleted* and the cursor moves on, the same rendered block is retried;
- a remote block that some later rendered block matches is kept for it,
  and the current rendered block is queued for insertion instead.

Queued blocks are flushed at the next match and at the end; every remote
block left past the cursor is deleted.  The result is a list of
operations in the exact order the remote calls must be issued.  This is
a heuristic, not a minimal edit script: it never looks back and costs
O(n*m) comparisons in the worst case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

from notion_docs_sync.blocks.types import Block

BlockMatcher = Callable[[Block, Block], bool]


class EditKind(str, Enum):
    MATCH = "match"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class EditOperation:
    """One step of a reconciliation plan.

    Attributes:
        kind: MATCH, INSERT, or DELETE.
        block_id: Remote block matched or deleted (MATCH/DELETE).
        anchor_id: Insert after this block; the document id means the
            document itself (INSERT).
        blocks: Rendered blocks to insert, in order (INSERT).
        rendered_indices: Positions of the rendered blocks involved.
        existing_index: Position of the remote block involved (MATCH/DELETE).
    """

    kind: EditKind
    block_id: str | None = None
    anchor_id: str | None = None
    blocks: tuple[Block, ...] = ()
    rendered_indices: tuple[int, ...] = ()
    existing_index: int | None = None


@dataclass
class _PlanState:
    anchor_id: str
    cursor: int = 0
    pending: list[int] = field(default_factory=list)
    operations: list[EditOperation] = field(default_factory=list)

    def flush(self, rendered: Sequence[Block]) -> None:
        if not self.pending:
            return
        self.operations.append(
            EditOperation(
                kind=EditKind.INSERT,
                anchor_id=self.anchor_id,
                blocks=tuple(rendered[i] for i in self.pending),
                rendered_indices=tuple(self.pending),
            )
        )
        self.pending = []


def plan_reconciliation(
    document_id: str,
    existing: Sequence[Block],
    rendered: Sequence[Block],
    matches: BlockMatcher,
) -> list[EditOperation]:
    """Compute the ordered edit operations turning *existing* into *rendered*.

    Args:
        document_id: Id of the document; the initial insertion anchor.
        existing: Remote blocks (response shape, each with an ``id``).
        rendered: Freshly rendered blocks (request shape).
        matches: ``matches(rendered_block, existing_block)`` equality test.

    Returns:
        Operations in issue order.  Inputs are not modified.
    """
    state = _PlanState(anchor_id=document_id)

    for m, block in enumerate(rendered):
        if state.cursor >= len(existing):
            state.pending.append(m)
            continue

        matched = False
        while state.cursor < len(existing):
            remote = existing[state.cursor]

            if matches(block, remote):
                state.flush(rendered)
                state.operations.append(
                    EditOperation(
                        kind=EditKind.MATCH,
                        block_id=remote["id"],
                        rendered_indices=(m,),
                        existing_index=state.cursor,
                    )
                )
                state.anchor_id = remote["id"]
                state.cursor += 1
                matched = True
                break

            kept_for_later = any(
                matches(later, remote) for later in rendered[m + 1 :]
            )
            if kept_for_later:
                state.pending.append(m)
                break

            state.operations.append(
                EditOperation(
                    kind=EditKind.DELETE,
                    block_id=remote["id"],
                    existing_index=state.cursor,
                )
            )
            state.cursor += 1

        # The scan deleted every remaining remote block without a match
        if not matched and state.cursor >= len(existing):
            state.pending.append(m)

    state.flush(rendered)

    for index in range(state.cursor, len(existing)):
        state.operations.append(
            EditOperation(
                kind=EditKind.DELETE,
                block_id=existing[index]["id"],
                existing_index=index,
            )
        )

    return state.operations
