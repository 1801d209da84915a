import json
import logging
import os
import sys

_TEXT_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter for structured debug output.

    Produces one JSON object per log record with fields: ts, level, logger, msg.
    Exception info is included as an "exc" field when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class GitHubActionsFormatter(logging.Formatter):
    """Render records as GitHub Actions workflow commands.

    WARNING and above become ``::warning::`` / ``::error::`` annotations,
    DEBUG becomes ``::debug::`` (only shown when step debugging is on),
    INFO is printed as plain text.
    """

    _COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        command = self._COMMANDS.get(record.levelno)
        if command is None:
            return message
        # Workflow commands are line oriented; newlines must be escaped.
        escaped = (
            message.replace("%", "%25")
            .replace("\r", "%0D")
            .replace("\n", "%0A")
        )
        return f"::{command}::{escaped}"


def setup_logging(
    mode: str = "cli",
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure logging based on execution mode.

    Args:
        mode: "cli" for plain stderr logging, "github" for GitHub Actions
            workflow commands on stdout.
        debug: If True, overrides LOG_LEVEL to DEBUG.
        log_file: Optional log file written in addition to the console.
        debug_format: "text" (default) or "json" for structured output.
        level: Level from the config file, used when LOG_LEVEL is unset.

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR). Default: INFO.
    """
    env_level = os.getenv("LOG_LEVEL", level or "INFO").upper()

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, env_level, logging.INFO)

    handlers: list[logging.Handler] = []

    if mode == "github":
        # The runner parses workflow commands from stdout
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(GitHubActionsFormatter())
    else:
        console = logging.StreamHandler(sys.stderr)
        if debug_format == "json":
            console.setFormatter(JsonFormatter(datefmt=_DATE_FORMAT))
        else:
            console.setFormatter(
                logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT)
            )
    handlers.append(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        if debug_format == "json":
            file_handler.setFormatter(JsonFormatter(datefmt=_DATE_FORMAT))
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)s] %(name)s %(message)s",
                    datefmt=_DATE_FORMAT,
                )
            )
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers)

    # Silence third-party libs unless DEBUG
    if log_level != logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("requests").setLevel(logging.WARNING)
        logging.getLogger("charset_normalizer").setLevel(logging.WARNING)
