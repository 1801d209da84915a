"""Block and rich-text vocabulary.

Blocks travel as plain JSON-like dicts, exactly as the Notion API sends
and receives them: ``{"type": "<t>", "<t>": {...content...}}``.  The enums
below name the variants this package produces or inspects specially;
blocks of any other type still flow through normalization and
comparison unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

Block = dict[str, Any]
RichText = dict[str, Any]

DEFAULT_COLOR = "default"


class BlockType(str, Enum):
    """Block variants emitted by the markdown renderer."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    QUOTE = "quote"
    CODE = "code"
    DIVIDER = "divider"
    TABLE = "table"
    TABLE_ROW = "table_row"
    EQUATION = "equation"
    IMAGE = "image"


class RichTextType(str, Enum):
    TEXT = "text"
    EQUATION = "equation"
    MENTION = "mention"


def default_annotations() -> dict[str, Any]:
    return {
        "bold": False,
        "italic": False,
        "strikethrough": False,
        "underline": False,
        "code": False,
        "color": DEFAULT_COLOR,
    }


def block_content(block: Block) -> dict[str, Any]:
    """Return the payload keyed by the block's own type, or ``{}``."""
    content = block.get(block.get("type") or "")
    return content if isinstance(content, dict) else {}


def plain_text_of(rich_text: RichText) -> str | None:
    """``plain_text`` of a rich-text item.

    Request-shape items produced locally carry no ``plain_text``; for
    those it is derived from the text content or equation expression,
    which is what Notion computes on write.
    """
    if "plain_text" in rich_text:
        return rich_text["plain_text"]
    kind = rich_text.get("type")
    if kind == RichTextType.TEXT:
        return rich_text.get("text", {}).get("content")
    if kind == RichTextType.EQUATION:
        return rich_text.get("equation", {}).get("expression")
    return None
