"""Markdown to Notion block conversion."""

from .common import markdown_to_notion_lang
from .markdown_to_blocks import MAX_TEXT_LENGTH, markdown_to_blocks

__all__ = [
    "MAX_TEXT_LENGTH",
    "markdown_to_blocks",
    "markdown_to_notion_lang",
]
