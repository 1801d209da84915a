"""Tests for the core sync engine."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

import pytest

from notion_docs_sync.converters.markdown_to_blocks import markdown_to_blocks
from notion_docs_sync.core.client import NotionClient
from notion_docs_sync.core.errors import NotionClientError
from notion_docs_sync.sync.engine import (
    SyncEngine,
    chunk_blocks,
    create_sync_service,
)
from notion_docs_sync.sync.models import (
    DirectoryContent,
    MarkdownFile,
    SyncStatus,
)

DOC = "dest-page"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _para(text: str) -> Dict[str, Any]:
    return {
        "type": "paragraph",
        "paragraph": {"rich_text": [{"type": "text", "text": {"content": text}}]},
    }


def _existing(text: str, block_id: Optional[str] = None) -> Dict[str, Any]:
    block = _para(text)
    block["id"] = block_id or text.lower()
    block["object"] = "block"
    block["archived"] = False
    block["paragraph"]["rich_text"][0]["plain_text"] = text
    return block


def _texts(blocks: List[Dict[str, Any]]) -> List[str]:
    return [b["paragraph"]["rich_text"][0]["text"]["content"] for b in blocks]


def _render_lines(text: str) -> List[Dict[str, Any]]:
    """Renderer stand-in: one paragraph per line; 'BOOM' fails."""
    if "BOOM" in text:
        raise ValueError("cannot render")
    return [_para(line) for line in text.splitlines() if line]


def _file(name: str, content: str, title: Optional[str] = None) -> MarkdownFile:
    return MarkdownFile(
        path=f"docs/{name}",
        relative_path=f"docs/{name}",
        title=title or name.rsplit(".", 1)[0],
        content=content,
    )


class FakeNotionClient:
    """Minimal NotionClient replacement for testing.

    Holds page children in memory and records every mutating call in the
    order it was issued.
    """

    def __init__(
        self,
        children: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        documents: Optional[set] = None,
    ) -> None:
        self.children: Dict[str, List[Dict[str, Any]]] = children or {}
        self.documents = documents if documents is not None else {DOC}
        self.calls: List[tuple] = []
        self.fetch_calls: List[tuple] = []
        self._next_block = 0
        self._next_page = 0

    async def fetch_children(self, block_id: str, recursive: bool = False):
        self.fetch_calls.append((block_id, recursive))
        return copy.deepcopy(self.children.get(block_id, []))

    async def append_children(self, parent_id, blocks, after=None):
        self.calls.append(("append", parent_id, _texts(blocks), after))
        created = []
        for _ in blocks:
            self._next_block += 1
            created.append({"object": "block", "id": f"new-{self._next_block}"})
        return created

    async def delete_block(self, block_id):
        self.calls.append(("delete", block_id))

    async def update_block(self, block_id, block):
        self.calls.append(("update", block_id))

    async def update_document_title(self, document_id, title):
        self.calls.append(("title", document_id, title))

    async def create_document(self, parent_id, title, children=None):
        self._next_page += 1
        page_id = f"page-{self._next_page}"
        self.calls.append(("create", parent_id, title))
        self.documents.add(page_id)
        return page_id

    async def fetch_document(self, document_id):
        if document_id in self.documents:
            return {"object": "page", "id": document_id}
        return None


def _engine(client: FakeNotionClient, content: DirectoryContent, **kwargs) -> SyncEngine:
    return SyncEngine(
        client,
        renderer=_render_lines,
        discoverer=lambda source: content,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# chunk_blocks
# ---------------------------------------------------------------------------


class TestChunkBlocks:
    def test_exact_multiple(self):
        chunks = chunk_blocks([_para(str(i)) for i in range(200)], 100)
        assert [len(c) for c in chunks] == [100, 100]

    def test_remainder(self):
        chunks = chunk_blocks([_para(str(i)) for i in range(5)], 2)
        assert [len(c) for c in chunks] == [2, 2, 1]

    def test_empty(self):
        assert chunk_blocks([]) == []


# ---------------------------------------------------------------------------
# sync_destination
# ---------------------------------------------------------------------------


class TestSyncDestination:
    """Tests for reconciling a single page."""

    async def test_no_op_when_identical(self):
        client = FakeNotionClient(
            children={DOC: [_existing("A"), _existing("B")]}
        )
        engine = _engine(client, DirectoryContent())

        await engine.sync_destination(DOC, "Docs", [_para("A"), _para("B")])

        assert client.calls == [("title", DOC, "Docs")]

    async def test_pure_append(self):
        client = FakeNotionClient()
        engine = _engine(client, DirectoryContent())

        await engine.sync_destination(
            DOC, "Docs", [_para("A"), _para("B"), _para("C")]
        )

        assert client.calls == [
            ("append", DOC, ["A", "B", "C"], None),
            ("title", DOC, "Docs"),
        ]

    async def test_pure_deletion(self):
        client = FakeNotionClient(
            children={DOC: [_existing("X"), _existing("Y")]}
        )
        engine = _engine(client, DirectoryContent())

        await engine.sync_destination(DOC, "Docs", [])

        assert client.calls == [
            ("delete", "x"),
            ("delete", "y"),
            ("title", DOC, "Docs"),
        ]

    async def test_reorder_call_sequence(self):
        """existing [A, B], rendered [B, A]."""
        client = FakeNotionClient(
            children={DOC: [_existing("A"), _existing("B")]}
        )
        engine = _engine(client, DirectoryContent())

        await engine.sync_destination(DOC, "Docs", [_para("B"), _para("A")])

        assert client.calls == [
            ("append", DOC, ["B"], None),
            ("delete", "b"),
            ("title", DOC, "Docs"),
        ]

    async def test_changed_block_inserted_after_previous_match(self):
        client = FakeNotionClient(
            children={DOC: [_existing("A"), _existing("X"), _existing("C")]}
        )
        engine = _engine(client, DirectoryContent())

        await engine.sync_destination(
            DOC, "Docs", [_para("A"), _para("B"), _para("C")]
        )

        assert client.calls == [
            ("delete", "x"),
            ("append", DOC, ["B"], "a"),
            ("title", DOC, "Docs"),
        ]

    async def test_replaced_only_block(self):
        client = FakeNotionClient(children={DOC: [_existing("X")]})
        engine = _engine(client, DirectoryContent())

        await engine.sync_destination(DOC, "Docs", [_para("A")])

        assert client.calls == [
            ("delete", "x"),
            ("append", DOC, ["A"], None),
            ("title", DOC, "Docs"),
        ]

    async def test_appends_chunked_at_end_of_page(self):
        client = FakeNotionClient()
        engine = _engine(client, DirectoryContent())
        blocks = [_para(f"p{i}") for i in range(250)]

        await engine.sync_destination(DOC, "Docs", blocks)

        appends = [c for c in client.calls if c[0] == "append"]
        assert [len(c[2]) for c in appends] == [100, 100, 50]
        assert all(c[3] is None for c in appends)
        assert appends[0][2][0] == "p0"
        assert appends[-1][2][-1] == "p249"

    async def test_anchored_chunks_follow_each_other(self):
        client = FakeNotionClient(children={DOC: [_existing("M", "m")]})
        engine = _engine(client, DirectoryContent())
        blocks = [_para("M")] + [_para(f"p{i}") for i in range(150)]

        await engine.sync_destination(DOC, "Docs", blocks)

        appends = [c for c in client.calls if c[0] == "append"]
        assert [(len(c[2]), c[3]) for c in appends] == [
            (100, "m"),
            (50, "new-100"),
        ]

    async def test_custom_batch_size(self):
        client = FakeNotionClient()
        engine = _engine(client, DirectoryContent(), append_batch_size=2)

        await engine.sync_destination(DOC, "Docs", [_para(str(i)) for i in range(5)])

        appends = [c for c in client.calls if c[0] == "append"]
        assert [c[2] for c in appends] == [["0", "1"], ["2", "3"], ["4"]]

    async def test_fetches_once_per_page(self):
        client = FakeNotionClient(children={DOC: [_existing("A")]})
        engine = _engine(client, DirectoryContent(), hydrate_children=True)

        await engine.sync_destination(DOC, "Docs", [_para("B")])

        assert client.fetch_calls == [(DOC, True)]

    async def test_remote_error_propagates(self):
        class FailingDelete(FakeNotionClient):
            async def delete_block(self, block_id):
                raise NotionClientError(
                    f"Failed to delete block {block_id}: object_not_found"
                )

        client = FailingDelete(children={DOC: [_existing("X")]})
        engine = _engine(client, DirectoryContent())

        with pytest.raises(NotionClientError, match="Failed to delete block x"):
            await engine.sync_destination(DOC, "Docs", [])

    async def test_rendered_markdown_matches_its_own_output(self):
        """Blocks rendered from markdown match their stored remote form."""
        rendered = markdown_to_blocks("# Title\n\nSome **bold** text.\n\n- one\n- two\n")
        existing = []
        for i, block in enumerate(rendered):
            remote = copy.deepcopy(block)
            remote["id"] = f"r{i}"
            remote["object"] = "block"
            existing.append(remote)
        client = FakeNotionClient(children={DOC: existing})
        engine = SyncEngine(client)

        await engine.sync_destination(DOC, "Docs", rendered)

        assert client.calls == [("title", DOC, "Docs")]


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRun:
    """Tests for the multi-document run."""

    async def test_readme_synced_into_destination_first(self):
        content = DirectoryContent(
            readme=_file("README.md", "Intro", title="docs"),
            files=[_file("guide.md", "Guide")],
        )
        client = FakeNotionClient()
        result = await _engine(client, content).run(DOC, "docs")

        assert result.status == SyncStatus.SUCCESS
        assert result.updated_pages == [DOC, "page-1"]
        assert result.errors == []
        assert client.calls == [
            ("append", DOC, ["Intro"], None),
            ("title", DOC, "docs"),
            ("create", DOC, "guide"),
            ("append", "page-1", ["Guide"], None),
            ("title", "page-1", "guide"),
        ]

    async def test_partial_failure(self):
        content = DirectoryContent(
            files=[_file("one.md", "first"), _file("two.md", "BOOM")]
        )
        client = FakeNotionClient()
        result = await _engine(client, content).run(DOC, "docs")

        assert result.status == SyncStatus.PARTIAL
        assert result.updated_pages == ["page-1"]
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to process docs/two.md:")
        assert "cannot render" in result.errors[0]

    async def test_failure_does_not_skip_later_documents(self):
        content = DirectoryContent(
            files=[
                _file("one.md", "BOOM"),
                _file("two.md", "second"),
                _file("three.md", "BOOM"),
            ]
        )
        client = FakeNotionClient()
        result = await _engine(client, content).run(DOC, "docs")

        assert result.status == SyncStatus.PARTIAL
        assert result.updated_pages == ["page-1"]
        assert [e.split(":")[0] for e in result.errors] == [
            "Failed to process docs/one.md",
            "Failed to process docs/three.md",
        ]

    async def test_remote_failure_is_per_document(self):
        class FailingTitle(FakeNotionClient):
            async def update_document_title(self, document_id, title):
                if title == "bad":
                    raise NotionClientError(
                        f"Failed to update destination {document_id}: validation_error"
                    )
                await super().update_document_title(document_id, title)

        content = DirectoryContent(
            files=[_file("bad.md", "x"), _file("good.md", "y")]
        )
        result = await _engine(FailingTitle(), content).run(DOC, "docs")

        assert result.status == SyncStatus.PARTIAL
        assert result.updated_pages == ["page-2"]
        assert "validation_error" in result.errors[0]

    async def test_discovery_failure_fails_run(self):
        def broken(source):
            raise ValueError(f"Source directory does not exist: {source}")

        client = FakeNotionClient()
        engine = SyncEngine(client, renderer=_render_lines, discoverer=broken)
        result = await engine.run(DOC, "missing")

        assert result.status == SyncStatus.FAILED
        assert result.updated_pages == []
        assert result.errors == [
            "Sync failed: Source directory does not exist: missing"
        ]
        assert client.calls == []

    async def test_missing_destination_fails_run(self):
        content = DirectoryContent(files=[_file("one.md", "x")])
        client = FakeNotionClient(documents=set())
        result = await _engine(client, content).run(DOC, "docs")

        assert result.status == SyncStatus.FAILED
        assert len(result.errors) == 1
        assert DOC in result.errors[0]
        assert client.calls == []

    async def test_readme_failure_fails_run(self):
        content = DirectoryContent(
            readme=_file("README.md", "BOOM", title="docs"),
            files=[_file("one.md", "x")],
        )
        client = FakeNotionClient()
        result = await _engine(client, content).run(DOC, "docs")

        assert result.status == SyncStatus.FAILED
        assert result.errors == ["Sync failed: cannot render"]
        assert not any(c[0] == "create" for c in client.calls)

    async def test_same_title_reuses_created_page(self):
        content = DirectoryContent(
            files=[
                _file("a/guide.md", "first", title="guide"),
                _file("b/guide.md", "second", title="guide"),
            ]
        )
        client = FakeNotionClient()
        result = await _engine(client, content).run(DOC, "docs")

        creates = [c for c in client.calls if c[0] == "create"]
        assert creates == [("create", DOC, "guide")]
        assert result.updated_pages == ["page-1", "page-1"]

    async def test_title_cache_is_per_run(self):
        content = DirectoryContent(files=[_file("guide.md", "x")])
        client = FakeNotionClient()
        engine = _engine(client, content)

        await engine.run(DOC, "docs")
        await engine.run(DOC, "docs")

        creates = [c for c in client.calls if c[0] == "create"]
        assert len(creates) == 2

    async def test_empty_tree(self):
        client = FakeNotionClient()
        result = await _engine(client, DirectoryContent()).run(DOC, "docs")

        assert result.status == SyncStatus.SUCCESS
        assert result.updated_pages == []
        assert client.calls == []

    async def test_uses_real_discovery(self, tmp_path):
        (tmp_path / "README.md").write_text("Root\n", encoding="utf-8")
        (tmp_path / "notes.md").write_text("Note\n", encoding="utf-8")
        client = FakeNotionClient()
        engine = SyncEngine(client, renderer=_render_lines)

        result = await engine.run(DOC, tmp_path)

        assert result.status == SyncStatus.SUCCESS
        assert result.updated_pages == [DOC, "page-1"]
        assert ("title", DOC, tmp_path.name) in client.calls
        assert ("create", DOC, "notes") in client.calls


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_rejects_oversized_batch(self):
        with pytest.raises(ValueError, match="append_batch_size"):
            SyncEngine(FakeNotionClient(), append_batch_size=101)

    def test_rejects_zero_batch(self):
        with pytest.raises(ValueError):
            SyncEngine(FakeNotionClient(), append_batch_size=0)

    def test_create_sync_service(self, mock_config):
        mock_config.requests_per_window = 2
        mock_config.window_seconds = 0.5
        mock_config.append_batch_size = 50
        mock_config.hydrate_children = True

        engine = create_sync_service(mock_config)

        assert isinstance(engine.client, NotionClient)
        assert engine.client.rate_limiter.max_calls == 2
        assert engine.client.rate_limiter.interval == 0.5
        assert engine.append_batch_size == 50
        assert engine.hydrate_children is True
