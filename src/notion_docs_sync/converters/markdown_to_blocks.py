"""Markdown to Notion blocks using the mistune AST."""

from __future__ import annotations

from typing import Any

import mistune

from ..blocks.types import Block, BlockType, RichText, default_annotations
from .common import markdown_to_notion_lang

# Notion rejects text content longer than this per rich-text item
MAX_TEXT_LENGTH = 2000

_PLUGINS = ["table", "strikethrough", "task_lists", "math"]

_INLINE_STYLES = {
    "emphasis": "italic",
    "strong": "bold",
    "strikethrough": "strikethrough",
}


def _text_item(
    content: str, annotations: dict[str, Any], link: str | None
) -> RichText:
    return {
        "type": "text",
        "text": {"content": content, "link": {"url": link} if link else None},
        "annotations": dict(annotations),
    }


def _equation_item(expression: str, annotations: dict[str, Any]) -> RichText:
    return {
        "type": "equation",
        "equation": {"expression": expression},
        "annotations": dict(annotations),
    }


def _same_style(a: RichText, b: RichText) -> bool:
    return (
        a["type"] == "text"
        and b["type"] == "text"
        and a["annotations"] == b["annotations"]
        and a["text"]["link"] == b["text"]["link"]
    )


def _finish_rich_text(items: list[RichText]) -> list[RichText]:
    """Merge adjacent runs with identical styling, then split long runs."""
    merged: list[RichText] = []
    for item in items:
        if item["type"] == "text" and not item["text"]["content"]:
            continue
        if merged and _same_style(merged[-1], item):
            merged[-1]["text"]["content"] += item["text"]["content"]
        else:
            merged.append(item)

    result: list[RichText] = []
    for item in merged:
        content = item["text"]["content"] if item["type"] == "text" else None
        if content is None or len(content) <= MAX_TEXT_LENGTH:
            result.append(item)
            continue
        for start in range(0, len(content), MAX_TEXT_LENGTH):
            piece = _text_item(
                content[start : start + MAX_TEXT_LENGTH],
                item["annotations"],
                (item["text"]["link"] or {}).get("url"),
            )
            result.append(piece)
    return result


def _block(block_type: BlockType | str, **content: Any) -> Block:
    kind = block_type.value if isinstance(block_type, BlockType) else block_type
    return {"type": kind, kind: content}


class NotionBlockRenderer:
    """Turn mistune AST tokens into request-shape Notion blocks."""

    def render(self, tokens: list[dict[str, Any]]) -> list[Block]:
        blocks: list[Block] = []
        for token in tokens:
            blocks.extend(self.render_token(token))
        return blocks

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------

    def rich_text(self, tokens: list[dict[str, Any]]) -> list[RichText]:
        return _finish_rich_text(
            self._inline(tokens, default_annotations(), None)
        )

    def _inline(
        self,
        tokens: list[dict[str, Any]],
        annotations: dict[str, Any],
        link: str | None,
    ) -> list[RichText]:
        items: list[RichText] = []
        for token in tokens:
            token_type = token.get("type")
            children = token.get("children") or []

            if token_type in _INLINE_STYLES:
                styled = {**annotations, _INLINE_STYLES[token_type]: True}
                items.extend(self._inline(children, styled, link))
            elif token_type == "codespan":
                styled = {**annotations, "code": True}
                items.append(_text_item(token.get("raw", ""), styled, link))
            elif token_type in ("link", "image"):
                url = (token.get("attrs") or {}).get("url") or link
                items.extend(self._inline(children, annotations, url))
            elif token_type == "softbreak":
                items.append(_text_item(" ", annotations, link))
            elif token_type == "linebreak":
                items.append(_text_item("\n", annotations, link))
            elif token_type == "inline_math":
                items.append(
                    _equation_item(token.get("raw", "").strip(), annotations)
                )
            elif "raw" in token:
                items.append(_text_item(token["raw"], annotations, link))
            elif children:
                items.extend(self._inline(children, annotations, link))
        return items

    # ------------------------------------------------------------------
    # Block content
    # ------------------------------------------------------------------

    def render_token(self, token: dict[str, Any]) -> list[Block]:
        token_type = token.get("type")
        children = token.get("children") or []
        attrs = token.get("attrs") or {}

        if token_type == "blank_line":
            return []

        if token_type in ("paragraph", "block_text"):
            image = self._standalone_image(children)
            if image is not None:
                return [image]
            return [_block(BlockType.PARAGRAPH, rich_text=self.rich_text(children))]

        if token_type == "heading":
            level = min(max(int(attrs.get("level", 1)), 1), 3)
            return [_block(f"heading_{level}", rich_text=self.rich_text(children))]

        if token_type == "thematic_break":
            return [_block(BlockType.DIVIDER)]

        if token_type == "block_code":
            code = token.get("raw", "").rstrip("\n")
            return [
                _block(
                    BlockType.CODE,
                    rich_text=_finish_rich_text(
                        [_text_item(code, default_annotations(), None)]
                    ),
                    language=markdown_to_notion_lang(attrs.get("info")),
                )
            ]

        if token_type == "block_math":
            return [
                _block(
                    BlockType.EQUATION,
                    expression=token.get("raw", "").strip(),
                )
            ]

        if token_type == "block_quote":
            return [self._container(BlockType.QUOTE, children)]

        if token_type == "list":
            return self._list(token)

        if token_type == "table":
            return [self._table(token)]

        if token_type == "block_html":
            raw = token.get("raw", "").strip()
            if not raw:
                return []
            return [
                _block(
                    BlockType.PARAGRAPH,
                    rich_text=_finish_rich_text(
                        [_text_item(raw, default_annotations(), None)]
                    ),
                )
            ]

        # Unknown block tokens: keep whatever text they carry
        if children:
            return self.render(children)
        if token.get("raw"):
            return [
                _block(
                    BlockType.PARAGRAPH,
                    rich_text=_finish_rich_text(
                        [_text_item(token["raw"], default_annotations(), None)]
                    ),
                )
            ]
        return []

    def _standalone_image(
        self, children: list[dict[str, Any]]
    ) -> Block | None:
        """An external image block when a paragraph holds a lone http(s) image."""
        if len(children) != 1 or children[0].get("type") != "image":
            return None
        url = (children[0].get("attrs") or {}).get("url", "")
        if not url.startswith(("http://", "https://")):
            return None
        return _block(BlockType.IMAGE, type="external", external={"url": url})

    def _container(
        self, block_type: BlockType, children: list[dict[str, Any]], **extra: Any
    ) -> Block:
        """A block whose leading paragraph becomes its text and the rest its children."""
        rich_text: list[RichText] = []
        rest = [c for c in children if c.get("type") != "blank_line"]
        if rest and rest[0].get("type") in ("paragraph", "block_text"):
            rich_text = self.rich_text(rest[0].get("children") or [])
            rest = rest[1:]

        content: dict[str, Any] = {"rich_text": rich_text, **extra}
        nested = self.render(rest)
        if nested:
            content["children"] = nested
        return _block(block_type, **content)

    def _list(self, token: dict[str, Any]) -> list[Block]:
        ordered = bool((token.get("attrs") or {}).get("ordered"))
        items: list[Block] = []
        for item in token.get("children") or []:
            item_children = item.get("children") or []
            if item.get("type") == "task_list_item":
                checked = bool((item.get("attrs") or {}).get("checked"))
                items.append(
                    self._container(BlockType.TO_DO, item_children, checked=checked)
                )
            elif ordered:
                items.append(
                    self._container(BlockType.NUMBERED_LIST_ITEM, item_children)
                )
            else:
                items.append(
                    self._container(BlockType.BULLETED_LIST_ITEM, item_children)
                )
        return items

    def _table(self, token: dict[str, Any]) -> Block:
        rows: list[list[dict[str, Any]]] = []
        for section in token.get("children") or []:
            if section.get("type") == "table_head":
                rows.append(section.get("children") or [])
            elif section.get("type") == "table_body":
                for row in section.get("children") or []:
                    rows.append(row.get("children") or [])

        width = max((len(cells) for cells in rows), default=1) or 1
        table_rows: list[Block] = []
        for cells in rows:
            rendered = [self.rich_text(cell.get("children") or []) for cell in cells]
            rendered.extend([] for _ in range(width - len(rendered)))
            table_rows.append(_block(BlockType.TABLE_ROW, cells=rendered))

        return _block(
            BlockType.TABLE,
            table_width=width,
            has_column_header=True,
            has_row_header=False,
            children=table_rows,
        )


def markdown_to_blocks(markdown_text: str) -> list[Block]:
    """
    Convert markdown text to an ordered list of request-shape Notion blocks.

    Args:
        markdown_text: Markdown formatted text

    Returns:
        Blocks ready for ``append_children``.
    """
    parse = mistune.create_markdown(renderer="ast", plugins=_PLUGINS)
    tokens: list[dict[str, Any]] = parse(markdown_text)  # type: ignore[assignment]
    return NotionBlockRenderer().render(tokens)
