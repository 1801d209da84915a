"""Runtime configuration for a sync run.

Reads Notion connection and sync settings from CLI args, environment
variables, .env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    NOTION_TOKEN: Notion integration token (required)
    NOTION_DESTINATION_ID: Page id (or page URL) receiving the docs (required)
    NOTION_SOURCE: Directory holding the markdown tree (required)
    NOTION_REQUESTS_PER_WINDOW: Request budget per pacing window (optional, default: 3)
    NOTION_WINDOW_SECONDS: Pacing window length in seconds (optional, default: 1.0)
    NOTION_APPEND_BATCH_SIZE: Blocks per append call (optional, default: 100)

When running as a GitHub Action the ``INPUT_NOTION_TOKEN``,
``INPUT_DESTINATION_ID`` and ``INPUT_SOURCE`` variables are accepted too.
"""

import logging
import os
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2022-06-28"
MAX_APPEND_BATCH_SIZE = 100

# 32 hex digits, with or without the dashes of the canonical UUID form
_NOTION_ID_PATTERN = re.compile(
    r"([0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12})"
)


@dataclass
class Config:
    notion_token: str
    destination_id: str
    source: str
    api_version: str = DEFAULT_API_VERSION
    requests_per_window: int = 3
    window_seconds: float = 1.0
    append_batch_size: int = MAX_APPEND_BATCH_SIZE
    request_timeout: float = 60.0
    hydrate_children: bool = False
    debug: bool = False


def normalize_notion_id(value: str) -> str:
    """Extract a dashed Notion id from a raw id or a page URL.

    Page URLs end in ``<slug>-<32 hex digits>``; the last id found wins.

    Raises:
        ValueError: If no id can be found in *value*.
    """
    matches = _NOTION_ID_PATTERN.findall(value.strip())
    if not matches:
        raise ValueError(
            f"Invalid destination id '{value}': expected a Notion page id or URL"
        )
    raw = matches[-1].replace("-", "").lower()
    return f"{raw[:8]}-{raw[8:12]}-{raw[12:16]}-{raw[16:20]}-{raw[20:]}"


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Normalizes ``destination_id`` in place.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the token or source is empty, the destination id is
            malformed, or a numeric setting is out of range.
    """
    if not config.notion_token.strip():
        raise ValueError(
            "Notion token cannot be empty. Set NOTION_TOKEN environment variable."
        )
    config.notion_token = config.notion_token.strip()

    config.destination_id = normalize_notion_id(config.destination_id)

    if not config.source.strip():
        raise ValueError(
            "Source directory cannot be empty. Set NOTION_SOURCE environment variable."
        )

    if not (1 <= config.append_batch_size <= MAX_APPEND_BATCH_SIZE):
        raise ValueError(
            f"Invalid append batch size {config.append_batch_size}: "
            f"must be between 1 and {MAX_APPEND_BATCH_SIZE}"
        )
    if config.requests_per_window < 1:
        raise ValueError("requests_per_window must be at least 1")
    if config.window_seconds <= 0:
        raise ValueError("window_seconds must be positive")

    if config.requests_per_window / config.window_seconds > 3:
        logger.warning(
            "Pacing above 3 requests/second (%d per %.2fs) may trigger Notion rate limits",
            config.requests_per_window,
            config.window_seconds,
        )


def _env(*names: str) -> str | None:
    """Return the first non-empty environment variable among *names*."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def _int_env(key: str, low: int, high: int) -> int | None:
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid {key} '{raw}': must be a number between {low} and {high}"
        ) from None
    if not (low <= value <= high):
        raise ValueError(
            f"Invalid {key} '{raw}': must be a number between {low} and {high}"
        )
    return value


def load_config(
    token: str | None = None,
    destination_id: str | None = None,
    source: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        token: Override Notion token.
        destination_id: Override destination page id or URL.
        source: Override source directory.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML config file
            (see ``config_schema.to_fallbacks``).

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If required config (token, destination, source) is
            missing after checking all sources, or a value is invalid.
    """
    fb = yaml_fallbacks or {}

    # --- Required strings: CLI > env > YAML > error ---

    final_token = (
        token or _env("NOTION_TOKEN", "INPUT_NOTION_TOKEN") or fb.get("token")
    )
    if not final_token:
        raise ValueError(
            "Notion token not found. Set NOTION_TOKEN environment variable, "
            "pass --token CLI argument, or add 'token' to config.yml."
        )

    final_destination = (
        destination_id
        or _env("NOTION_DESTINATION_ID", "INPUT_DESTINATION_ID")
        or fb.get("destination_id")
    )
    if not final_destination:
        raise ValueError(
            "Destination id not found. Set NOTION_DESTINATION_ID environment variable, "
            "pass --destination-id CLI argument, or add 'destination_id' to config.yml."
        )

    final_source = source or _env("NOTION_SOURCE", "INPUT_SOURCE") or fb.get("source")
    if not final_source:
        raise ValueError(
            "Source directory not found. Set NOTION_SOURCE environment variable, "
            "pass --source CLI argument, or add 'source' to config.yml."
        )

    # --- Numeric fields: env > YAML > default ---

    requests_per_window = _int_env("NOTION_REQUESTS_PER_WINDOW", 1, 100)
    if requests_per_window is None:
        requests_per_window = int(fb.get("requests_per_window", 3))

    window_raw = os.getenv("NOTION_WINDOW_SECONDS")
    if window_raw is not None:
        try:
            window_seconds = float(window_raw)
        except ValueError:
            raise ValueError(
                f"Invalid NOTION_WINDOW_SECONDS '{window_raw}': must be a positive number"
            ) from None
    else:
        window_seconds = float(fb.get("window_seconds", 1.0))

    batch_size = _int_env(
        "NOTION_APPEND_BATCH_SIZE", 1, MAX_APPEND_BATCH_SIZE
    )
    if batch_size is None:
        batch_size = int(fb.get("append_batch_size", MAX_APPEND_BATCH_SIZE))

    config = Config(
        notion_token=final_token,
        destination_id=final_destination,
        source=final_source,
        api_version=fb.get("api_version") or DEFAULT_API_VERSION,
        requests_per_window=requests_per_window,
        window_seconds=window_seconds,
        append_batch_size=batch_size,
        request_timeout=float(fb.get("request_timeout", 60.0)),
        hydrate_children=bool(fb.get("hydrate_children", False)),
        debug=debug or bool(fb.get("debug", False)),
    )

    validate_config(config)

    return config
