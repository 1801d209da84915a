"""Markdown to Notion sync engine.

Public API for pushing a tree of markdown documents into Notion pages.

Architecture
------------
Each page is reconciled with a **greedy forward scan**: the page's current
blocks are fetched once, aligned against the freshly rendered blocks, and
only the blocks that no longer match are deleted or appended.  Matched
blocks keep their Notion identity, so comments and history survive.

Modules:

- ``discovery``  -- ``discover``: walks the source tree in a stable order.
- ``reconciler`` -- ``plan_reconciliation``: pure alignment into
  match/insert/delete operations.
- ``engine``     -- ``SyncEngine``: executes plans for a whole run.
- ``models``     -- ``SyncStatus``, ``SyncResult``, ``MarkdownFile``,
  ``DirectoryContent``: core data contracts.
- ``reporter``   -- Human-readable, JSON and GitHub Actions output.

Usage example
-------------
::

    import asyncio

    from notion_docs_sync.config import load_config
    from notion_docs_sync.sync import create_sync_service, format_sync_result

    config = load_config(token="secret_...", destination_id="...", source="docs")
    engine = create_sync_service(config)

    result = asyncio.run(engine.run(config.destination_id, config.source))
    print(format_sync_result(result))
"""

from .discovery import discover
from .engine import SyncEngine, chunk_blocks, create_sync_service
from .models import DirectoryContent, MarkdownFile, SyncResult, SyncStatus
from .reconciler import EditKind, EditOperation, plan_reconciliation
from .reporter import format_sync_result, result_to_json, write_action_outputs

__all__ = [
    "DirectoryContent",
    "EditKind",
    "EditOperation",
    "MarkdownFile",
    "SyncEngine",
    "SyncResult",
    "SyncStatus",
    "chunk_blocks",
    "create_sync_service",
    "discover",
    "format_sync_result",
    "plan_reconciliation",
    "result_to_json",
    "write_action_outputs",
]
