"""Notion block vocabulary, normalization, and structural comparison."""

from .comparator import BlockComparator, BlockDifference, find_block_differences
from .normalizer import METADATA_FIELDS, BlockNormalizer, normalize_block
from .types import Block, BlockType, RichText, RichTextType

__all__ = [
    "METADATA_FIELDS",
    "Block",
    "BlockComparator",
    "BlockDifference",
    "BlockNormalizer",
    "BlockType",
    "RichText",
    "RichTextType",
    "find_block_differences",
    "normalize_block",
]
