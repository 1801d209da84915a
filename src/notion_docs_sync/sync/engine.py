"""Sync engine that pushes a markdown tree into Notion.

The ``SyncEngine`` ties together discovery, rendering, comparison and the
Notion client into a complete run.  It:

1. Discovers the markdown tree under the source directory.
2. Checks that the destination page exists.
3. Syncs the root README (if any) into the destination page itself.
4. Syncs every other document into a child page of the destination,
   creating it on first use within the run.
5. Builds and returns a ``SyncResult``.

Syncing one page means fetching its current blocks once, planning the
edits with ``plan_reconciliation`` and issuing the deletes and appends in
plan order, then setting the page title.

Error handling is per-document for non-root files: a single failure is
recorded and the run continues.  Discovery, destination, and root README
failures end the run with ``failed`` status.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from notion_docs_sync.blocks.comparator import BlockComparator
from notion_docs_sync.blocks.types import Block
from notion_docs_sync.config import MAX_APPEND_BATCH_SIZE, Config
from notion_docs_sync.converters.markdown_to_blocks import markdown_to_blocks
from notion_docs_sync.core.async_utils import run_sync
from notion_docs_sync.core.client import NotionClient
from notion_docs_sync.core.errors import NotionClientError
from notion_docs_sync.core.rate_limiter import RateLimiter
from notion_docs_sync.sync.discovery import discover
from notion_docs_sync.sync.models import DirectoryContent, SyncResult, SyncStatus
from notion_docs_sync.sync.reconciler import EditKind, plan_reconciliation

logger = logging.getLogger(__name__)

Renderer = Callable[[str], list[Block]]
Discoverer = Callable[[str | Path], DirectoryContent]


def chunk_blocks(
    blocks: list[Block], size: int = MAX_APPEND_BATCH_SIZE
) -> list[list[Block]]:
    """Split *blocks* into consecutive chunks of at most *size* blocks."""
    return [blocks[i : i + size] for i in range(0, len(blocks), size)]


class SyncEngine:
    """Reconcile Notion pages with a local markdown tree.

    Args:
        client: Notion client (anything exposing the same async methods).
        comparator: Decides whether a rendered and a remote block match.
        renderer: Markdown text to request-shape blocks.
        discoverer: Source directory to ``DirectoryContent``.
        append_batch_size: Blocks per append call (1-100).
        hydrate_children: Fetch nested children of remote blocks so that
            nested lists and tables can match instead of being recreated.
    """

    def __init__(
        self,
        client: NotionClient,
        comparator: BlockComparator | None = None,
        renderer: Renderer = markdown_to_blocks,
        discoverer: Discoverer = discover,
        append_batch_size: int = MAX_APPEND_BATCH_SIZE,
        hydrate_children: bool = False,
    ) -> None:
        if not (1 <= append_batch_size <= MAX_APPEND_BATCH_SIZE):
            raise ValueError(
                f"append_batch_size must be between 1 and {MAX_APPEND_BATCH_SIZE}"
            )
        self.client = client
        self.comparator = comparator or BlockComparator()
        self.renderer = renderer
        self.discoverer = discoverer
        self.append_batch_size = append_batch_size
        self.hydrate_children = hydrate_children

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def run(self, destination_id: str, source: str | Path) -> SyncResult:
        """Sync every markdown document under *source* into *destination_id*.

        Returns:
            A ``SyncResult``; this method does not raise for sync failures.
        """
        updated_pages: list[str] = []
        errors: list[str] = []
        status = SyncStatus.SUCCESS
        # Title -> page id for pages created during this run
        destination_cache: dict[str, str] = {}

        try:
            content = await run_sync(self.discoverer, source)
            logger.info(
                "Found %d markdown files to process", len(content.files)
            )

            if await self.client.fetch_document(destination_id) is None:
                raise NotionClientError(
                    f"Destination page {destination_id} not found or not shared "
                    "with the integration"
                )

            if content.readme is not None:
                logger.info("Processing %s...", content.readme.relative_path)
                blocks = self.renderer(content.readme.content)
                await self.sync_destination(
                    destination_id, content.readme.title, blocks
                )
                updated_pages.append(destination_id)

            for file in content.files:
                try:
                    logger.info("Processing %s...", file.relative_path)
                    blocks = self.renderer(file.content)
                    page_id = await self.resolve_destination_id(
                        destination_id, file.title, destination_cache
                    )
                    await self.sync_destination(page_id, file.title, blocks)
                    updated_pages.append(page_id)
                except Exception as exc:
                    message = f"Failed to process {file.path}: {exc}"
                    logger.error(message)
                    errors.append(message)
                    status = SyncStatus.PARTIAL
        except Exception as exc:
            logger.error("Sync failed: %s", exc)
            return SyncResult(
                status=SyncStatus.FAILED,
                updated_pages=updated_pages,
                errors=[f"Sync failed: {exc}"],
            )

        return SyncResult(
            status=status, updated_pages=updated_pages, errors=errors
        )

    # ------------------------------------------------------------------
    # Per-page reconciliation
    # ------------------------------------------------------------------

    async def sync_destination(
        self, destination_id: str, title: str, blocks: list[Block]
    ) -> None:
        """Make the children of *destination_id* match *blocks*, then set its title."""
        existing = await self.client.fetch_children(
            destination_id, recursive=self.hydrate_children
        )
        plan = plan_reconciliation(
            destination_id, existing, blocks, self.comparator.compare
        )

        kept = deleted = inserted = 0
        for operation in plan:
            if operation.kind == EditKind.MATCH:
                kept += 1
            elif operation.kind == EditKind.DELETE:
                logger.debug("Deleting block %s", operation.block_id)
                await self.client.delete_block(operation.block_id)
                deleted += 1
            elif operation.kind == EditKind.INSERT:
                await self._insert_blocks(
                    destination_id, operation.anchor_id, list(operation.blocks)
                )
                inserted += len(operation.blocks)

        logger.debug("Updating title of %s to %r", destination_id, title)
        await self.client.update_document_title(destination_id, title)
        logger.info(
            "Synced %s: %d kept, %d deleted, %d appended",
            destination_id,
            kept,
            deleted,
            inserted,
        )

    async def _insert_blocks(
        self, destination_id: str, anchor_id: str | None, blocks: list[Block]
    ) -> None:
        """Append *blocks* after *anchor_id*, chunked to the API limit.

        An anchor equal to the page id means "at the end of the page".
        """
        after = None if anchor_id in (None, destination_id) else anchor_id
        for chunk in chunk_blocks(blocks, self.append_batch_size):
            logger.debug(
                "Appending %d blocks to %s after %s",
                len(chunk),
                destination_id,
                after or "end",
            )
            created = await self.client.append_children(
                destination_id, chunk, after=after
            )
            # Keep later chunks behind the ones just written
            if after is not None and created:
                after = created[-1]["id"]

    async def resolve_destination_id(
        self, parent_id: str, title: str, cache: dict[str, str]
    ) -> str:
        """Return the page for *title*, creating it under *parent_id* on first use.

        Args:
            parent_id: The run's destination page.
            title: Document title.
            cache: Title to page id map owned by the current run.
        """
        page_id = cache.get(title)
        if page_id is None:
            page_id = await self.client.create_document(parent_id, title, [])
            cache[title] = page_id
            logger.info("Created page %r (%s)", title, page_id)
        return page_id


def create_sync_service(config: Config) -> SyncEngine:
    """Wire a ``SyncEngine`` with a rate-limited ``NotionClient`` for *config*."""
    rate_limiter = RateLimiter(config.requests_per_window, config.window_seconds)
    client = NotionClient(config, rate_limiter=rate_limiter)
    return SyncEngine(
        client,
        comparator=BlockComparator(),
        append_batch_size=config.append_batch_size,
        hydrate_children=config.hydrate_children,
    )
