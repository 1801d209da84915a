"""Structural equivalence of Notion blocks.

Two blocks are equivalent when ``find_block_differences`` reports nothing
after both have been normalized.  The comparison looks only at the
content that markdown rendering controls:

1. block ``type`` (a mismatch ends the comparison),
2. ``table_width`` for tables (a mismatch ends the comparison),
3. ``rich_text`` item by item, and the ``cells`` of table rows cell by
   cell: type, plain text, annotations, and the text content or equation
   expression (mentions are compared by plain text only),
4. ``color``, with an absent color read as ``"default"``,
5. ``icon``,
6. ``children``, pairwise and in order.

Anything else in the payload (``is_toggleable``, ``language``,
``checked``...) is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .normalizer import BlockNormalizer
from .types import (
    DEFAULT_COLOR,
    Block,
    BlockType,
    RichText,
    RichTextType,
    block_content,
    default_annotations,
    plain_text_of,
)


@dataclass(frozen=True)
class BlockDifference:
    """One mismatch between two blocks.

    Attributes:
        path: Dotted location, e.g. ``paragraph.rich_text[0].plain_text``.
        detail: What differed.
    """

    path: str
    detail: str

    def __str__(self) -> str:
        return f"{self.path}: {self.detail}"


def find_block_differences(
    block1: Block | None, block2: Block | None, path: str = ""
) -> list[BlockDifference]:
    """Return every difference between two (normalized) blocks.

    Args:
        block1: First block.
        block2: Second block.
        path: Prefix for reported paths; used when recursing into children.
    """
    if not block1 or not block2:
        return [BlockDifference(path.rstrip(".") or "block", "one block is missing")]

    type1 = block1.get("type")
    type2 = block2.get("type")
    if type1 != type2:
        return [BlockDifference(f"{path}type", f'"{type1}" != "{type2}"')]

    differences: list[BlockDifference] = []
    prefix = f"{path}{type1}"
    content1 = block_content(block1)
    content2 = block_content(block2)

    # Width decides whether rows can line up at all
    if type1 == BlockType.TABLE and (
        "table_width" in content1 or "table_width" in content2
    ):
        width1 = content1.get("table_width")
        width2 = content2.get("table_width")
        if width1 != width2:
            return [
                BlockDifference(
                    f"{prefix}.table_width", f"{width1} != {width2}"
                )
            ]

    if "rich_text" in content1 and "rich_text" in content2:
        differences.extend(
            _rich_text_differences(
                content1["rich_text"] or [],
                content2["rich_text"] or [],
                f"{prefix}.rich_text",
            )
        )

    if "cells" in content1 or "cells" in content2:
        differences.extend(
            _cell_differences(
                content1.get("cells") or [],
                content2.get("cells") or [],
                f"{prefix}.cells",
            )
        )

    if "color" in content1 or "color" in content2:
        color1 = content1.get("color") or DEFAULT_COLOR
        color2 = content2.get("color") or DEFAULT_COLOR
        if color1 != color2:
            differences.append(
                BlockDifference(f"{prefix}.color", f'"{color1}" != "{color2}"')
            )

    if content1.get("icon") or content2.get("icon"):
        if content1.get("icon") != content2.get("icon"):
            differences.append(
                BlockDifference(
                    f"{prefix}.icon",
                    f"{content1.get('icon')!r} != {content2.get('icon')!r}",
                )
            )

    if "children" in content1 or "children" in content2:
        children1 = content1.get("children") or []
        children2 = content2.get("children") or []
        if len(children1) != len(children2):
            differences.append(
                BlockDifference(
                    f"{prefix}.children",
                    f"length mismatch ({len(children1)} != {len(children2)})",
                )
            )
        else:
            for i, (child1, child2) in enumerate(zip(children1, children2)):
                differences.extend(
                    find_block_differences(
                        child1, child2, f"{prefix}.children[{i}]."
                    )
                )

    return differences


def _rich_text_differences(
    items1: list[RichText], items2: list[RichText], path: str
) -> list[BlockDifference]:
    if len(items1) != len(items2):
        return [
            BlockDifference(
                path, f"length mismatch ({len(items1)} != {len(items2)})"
            )
        ]

    differences: list[BlockDifference] = []
    for i, (rt1, rt2) in enumerate(zip(items1, items2)):
        item_path = f"{path}[{i}]"
        kind1 = rt1.get("type")
        kind2 = rt2.get("type")
        if kind1 != kind2:
            differences.append(
                BlockDifference(f"{item_path}.type", f'"{kind1}" != "{kind2}"')
            )
            continue

        text1 = plain_text_of(rt1)
        text2 = plain_text_of(rt2)
        if text1 != text2:
            differences.append(
                BlockDifference(
                    f"{item_path}.plain_text", f"{text1!r} != {text2!r}"
                )
            )

        differences.extend(
            _annotation_differences(
                rt1.get("annotations") or {},
                rt2.get("annotations") or {},
                f"{item_path}.annotations",
            )
        )

        if kind1 == RichTextType.TEXT:
            content1 = (rt1.get("text") or {}).get("content")
            content2 = (rt2.get("text") or {}).get("content")
            if content1 != content2:
                differences.append(
                    BlockDifference(
                        f"{item_path}.text.content",
                        f"{content1!r} != {content2!r}",
                    )
                )
        elif kind1 == RichTextType.EQUATION:
            expr1 = (rt1.get("equation") or {}).get("expression")
            expr2 = (rt2.get("equation") or {}).get("expression")
            if expr1 != expr2:
                differences.append(
                    BlockDifference(
                        f"{item_path}.equation.expression",
                        f"{expr1!r} != {expr2!r}",
                    )
                )
        # Mention payloads vary by subtype; plain_text already covered them.

    return differences


def _cell_differences(
    cells1: list[list[RichText]], cells2: list[list[RichText]], path: str
) -> list[BlockDifference]:
    if len(cells1) != len(cells2):
        return [
            BlockDifference(
                path, f"length mismatch ({len(cells1)} != {len(cells2)})"
            )
        ]
    differences: list[BlockDifference] = []
    for i, (cell1, cell2) in enumerate(zip(cells1, cells2)):
        differences.extend(
            _rich_text_differences(cell1 or [], cell2 or [], f"{path}[{i}]")
        )
    return differences


def _annotation_differences(
    annotations1: dict[str, Any], annotations2: dict[str, Any], path: str
) -> list[BlockDifference]:
    defaults = default_annotations()
    keys = list(annotations1)
    keys.extend(key for key in annotations2 if key not in annotations1)

    differences: list[BlockDifference] = []
    for key in keys:
        value1 = annotations1.get(key, defaults.get(key))
        value2 = annotations2.get(key, defaults.get(key))
        if value1 != value2:
            differences.append(
                BlockDifference(f"{path}.{key}", f"{value1!r} != {value2!r}")
            )
    return differences


class BlockComparator:
    """Decide whether a rendered block and a remote block hold the same content.

    Args:
        normalizer: Strips remote metadata before comparing.
    """

    def __init__(self, normalizer: BlockNormalizer | None = None) -> None:
        self.normalizer = normalizer or BlockNormalizer()

    def compare(self, rendered: Block, remote: Block) -> bool:
        """Compare a freshly rendered block with a block fetched from Notion."""
        rendered_type = rendered.get("type")
        if not rendered_type or rendered_type != remote.get("type"):
            return False
        return self.are_identical(rendered, self.normalizer.normalize(remote))

    def are_identical(self, block1: Block | None, block2: Block | None) -> bool:
        """True when the two blocks, normalized, show no differences."""
        if not block1 or not block2:
            return False
        return not self.differences(block1, block2)

    def differences(self, block1: Block, block2: Block) -> list[BlockDifference]:
        """Normalize both blocks and list every difference between them."""
        return find_block_differences(
            self.normalizer.normalize(block1),
            self.normalizer.normalize(block2),
        )
