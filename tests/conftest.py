"""Shared pytest fixtures for notion-docs-sync tests."""

from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from notion_docs_sync.config import Config

load_dotenv()

DESTINATION_ID = "0123abcd-0000-4000-8000-00000000a001"


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live Notion workspace",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live Notion workspace"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        # --run-live given: do not skip live tests
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(
        notion_token="secret_test_token",
        destination_id=DESTINATION_ID,
        source="docs",
    )


@pytest.fixture
def mock_notion_client(mock_config):
    """Create a mock NotionClient instance for testing."""
    from notion_docs_sync.core.client import NotionClient

    client = MagicMock(spec=NotionClient)
    client.config = mock_config
    return client


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable the config layer reads."""
    for name in (
        "NOTION_TOKEN",
        "INPUT_NOTION_TOKEN",
        "NOTION_DESTINATION_ID",
        "INPUT_DESTINATION_ID",
        "NOTION_SOURCE",
        "INPUT_SOURCE",
        "NOTION_REQUESTS_PER_WINDOW",
        "NOTION_WINDOW_SECONDS",
        "NOTION_APPEND_BATCH_SIZE",
        "NOTION_SYNC_CONFIG",
        "LOG_LEVEL",
        "GITHUB_ACTIONS",
        "GITHUB_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
