import logging
import threading
from typing import Any

import requests

from ..config import MAX_APPEND_BATCH_SIZE, Config
from .async_utils import run_sync
from .errors import NotionAPIError, NotionClientError
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

Block = dict[str, Any]


class NotionClient:
    """Low-level Notion REST client used by the sync engine.

    HTTP is done with a thread-local ``requests.Session``; every request
    runs off the event loop via ``run_sync`` and passes the shared
    ``RateLimiter`` first, so callers simply ``await`` each operation.
    """

    BASE_URL = "https://api.notion.com/v1"

    def __init__(
        self, config: Config, rate_limiter: RateLimiter | None = None
    ):
        self.config = config
        self.rate_limiter = rate_limiter or RateLimiter(
            config.requests_per_window, config.window_seconds
        )
        self._thread_local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The current thread's session."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "Authorization": f"Bearer {self.config.notion_token}",
                "Content-Type": "application/json",
                "Notion-Version": self.config.api_version,
            }
        )
        return session

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make a blocking request to the Notion API and return the parsed body.

        Raises:
            NotionAPIError: On any HTTP status >= 400.
            requests.RequestException: On transport failures.
        """
        response = self._get_session().request(
            method,
            f"{self.BASE_URL}{path}",
            json=payload,
            params=params,
            timeout=(10, self.config.request_timeout),
        )
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                raise NotionAPIError(
                    message=response.text or "Unknown error",
                    status_code=response.status_code,
                ) from None
            raise NotionAPIError(
                message=body.get("message", "Unknown error"),
                status_code=response.status_code,
                code=body.get("code", ""),
            )
        if not response.content:
            return {}
        return response.json()

    async def _call(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        await self.rate_limiter.wait()
        return await run_sync(self._request, method, path, payload, params)

    @staticmethod
    def _describe(error: Exception) -> str:
        if isinstance(error, NotionAPIError) and error.code:
            return error.code
        return str(error)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def fetch_children(
        self, block_id: str, recursive: bool = False
    ) -> list[Block]:
        """
        Fetch every child block of a page or block, following pagination.

        Partial block objects (no ``type``) are dropped.  With
        ``recursive=True`` blocks flagged ``has_children`` get their own
        children fetched and stored under ``block[type]["children"]``.
        """
        blocks: list[Block] = []
        cursor: str | None = None
        try:
            while True:
                params: dict[str, Any] = {"page_size": 100}
                if cursor:
                    params["start_cursor"] = cursor
                page = await self._call(
                    "GET", f"/blocks/{block_id}/children", params=params
                )
                blocks.extend(
                    block for block in page.get("results", []) if "type" in block
                )
                cursor = page.get("next_cursor")
                if not page.get("has_more") or not cursor:
                    break
        except (NotionAPIError, requests.RequestException) as e:
            raise NotionClientError(
                f"Failed to get block children for {block_id}: {self._describe(e)}"
            ) from e

        if recursive:
            for block in blocks:
                if block.get("has_children") and isinstance(
                    block.get(block["type"]), dict
                ):
                    block[block["type"]]["children"] = (
                        await self.fetch_children(block["id"], recursive=True)
                    )

        logger.debug("Fetched %d blocks under %s", len(blocks), block_id)
        return blocks

    async def append_children(
        self,
        parent_id: str,
        blocks: list[Block],
        after: str | None = None,
    ) -> list[Block]:
        """
        Append up to 100 blocks to a parent's children.

        Args:
            parent_id: Page or block receiving the children.
            blocks: Request-shape blocks; the caller chunks larger lists.
            after: Optional sibling id to insert after instead of at the end.

        Returns:
            The created blocks as returned by Notion.

        Raises:
            ValueError: If more than 100 blocks are passed.
        """
        if len(blocks) > MAX_APPEND_BATCH_SIZE:
            raise ValueError(
                f"Cannot append {len(blocks)} blocks in one call "
                f"(max {MAX_APPEND_BATCH_SIZE})"
            )
        payload: dict[str, Any] = {"children": blocks}
        if after:
            payload["after"] = after
        try:
            response = await self._call(
                "PATCH", f"/blocks/{parent_id}/children", payload=payload
            )
        except (NotionAPIError, requests.RequestException) as e:
            raise NotionClientError(
                f"Failed to append blocks to {parent_id}: {self._describe(e)}"
            ) from e
        return response.get("results", [])

    async def update_block(self, block_id: str, block: Block) -> None:
        """Update an existing block with a partial request-shape block."""
        try:
            await self._call("PATCH", f"/blocks/{block_id}", payload=block)
        except (NotionAPIError, requests.RequestException) as e:
            raise NotionClientError(
                f"Failed to update block {block_id}: {self._describe(e)}"
            ) from e

    async def delete_block(self, block_id: str) -> None:
        """Delete (archive) a block.  Deleting twice is an error."""
        try:
            await self._call("DELETE", f"/blocks/{block_id}")
        except (NotionAPIError, requests.RequestException) as e:
            raise NotionClientError(
                f"Failed to delete block {block_id}: {self._describe(e)}"
            ) from e

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    @staticmethod
    def _title_property(title: str) -> dict[str, Any]:
        return {"title": {"title": [{"text": {"content": title}}]}}

    async def create_document(
        self,
        parent_id: str,
        title: str,
        children: list[Block] | None = None,
    ) -> str:
        """Create a child page and return its id."""
        payload = {
            "parent": {"page_id": parent_id},
            "properties": self._title_property(title),
            "children": children or [],
        }
        try:
            response = await self._call("POST", "/pages", payload=payload)
        except (NotionAPIError, requests.RequestException) as e:
            raise NotionClientError(
                f"Failed to create page under {parent_id}: {self._describe(e)}"
            ) from e
        return response["id"]

    async def update_document_title(
        self, document_id: str, title: str
    ) -> None:
        try:
            await self._call(
                "PATCH",
                f"/pages/{document_id}",
                payload={"properties": self._title_property(title)},
            )
        except (NotionAPIError, requests.RequestException) as e:
            raise NotionClientError(
                f"Failed to update destination {document_id}: {self._describe(e)}"
            ) from e

    async def fetch_document(self, document_id: str) -> dict[str, Any] | None:
        """
        Retrieve a page.

        Returns:
            The page object, or ``None`` when Notion reports it missing.
            Every other failure propagates.
        """
        try:
            return await self._call("GET", f"/pages/{document_id}")
        except NotionAPIError as e:
            if e.is_not_found:
                return None
            raise
