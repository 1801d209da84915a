"""Pydantic models for the sync engine.

Defines the data contracts shared by discovery, the engine, and the
reporter:

- ``SyncStatus``: Outcome of a whole run.
- ``SyncResult``: Aggregate result of a run (status, pages, errors).
- ``MarkdownFile``: One discovered markdown document.
- ``DirectoryContent``: Everything discovery found under the source root.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class SyncStatus(str, Enum):
    """Outcome of a sync run.

    ``FAILED`` means the run itself could not proceed (discovery, the
    destination, or the root document failed); ``PARTIAL`` means at least
    one document failed while the run continued.
    """

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class SyncResult(BaseModel):
    """Aggregate result of one sync run.

    Attributes:
        status: Overall outcome.
        updated_pages: Destination ids reconciled successfully, in order.
        errors: Error messages in the order they were encountered.
    """

    status: SyncStatus = SyncStatus.SUCCESS
    updated_pages: list[str] = []
    errors: list[str] = []

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.status != SyncStatus.FAILED


class MarkdownFile(BaseModel):
    """A markdown document found under the source root.

    Attributes:
        path: Path of the file as discovered.
        relative_path: Path relative to the working directory, for messages.
        title: Notion page title.
        content: Decoded markdown text.
    """

    path: str
    relative_path: str
    title: str
    content: str

    model_config = {"frozen": True}


class DirectoryContent(BaseModel):
    """Result of walking the source tree.

    Attributes:
        files: Non-root documents in processing order.
        directories: Every directory visited below the root.
        readme: The root README, synced into the run's destination page.
    """

    files: list[MarkdownFile] = []
    directories: list[str] = []
    readme: MarkdownFile | None = None

    model_config = {"frozen": True}
