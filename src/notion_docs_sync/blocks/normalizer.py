"""Strip persistence metadata from blocks so they can be compared.

A block fetched from Notion carries identity and audit fields that a
freshly rendered block never has.  ``normalize_block`` removes them from
the block, from its type payload, and recursively from every child.
"""

from __future__ import annotations

import copy

from .types import Block

METADATA_FIELDS: tuple[str, ...] = (
    "id",
    "created_time",
    "created_by",
    "last_edited_time",
    "last_edited_by",
    "parent",
    "archived",
    "object",
)


def normalize_block(block: Block) -> Block:
    """Return a deep copy of *block* with all metadata fields removed.

    The input is never mutated.  Request-shape blocks come back equal to
    their input since they carry none of the metadata fields.
    """
    normalized = copy.deepcopy(block)
    _strip(normalized)
    return normalized


def _strip(block: Block) -> None:
    for field in METADATA_FIELDS:
        block.pop(field, None)

    block_type = block.get("type")
    content = block.get(block_type) if block_type else None
    if not isinstance(content, dict):
        return

    for field in METADATA_FIELDS:
        content.pop(field, None)

    children = content.get("children")
    if isinstance(children, list):
        for child in children:
            if isinstance(child, dict):
                _strip(child)


class BlockNormalizer:
    """Object wrapper around ``normalize_block`` for injection into the comparator."""

    metadata_fields = METADATA_FIELDS

    def normalize(self, block: Block) -> Block:
        return normalize_block(block)
