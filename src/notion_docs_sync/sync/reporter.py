"""Sync result formatting functions.

Provides human-readable and machine-readable output for a sync run:

- ``format_sync_result`` -- post-sync summary for the terminal.
- ``result_to_json`` -- structured dict for ``--json`` output.
- ``write_action_outputs`` -- GitHub Actions step outputs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SyncResult

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_sync_result(result: SyncResult) -> str:
    """Format a sync result as human-readable text.

    Sections are only included when they contain at least one entry.

    Args:
        result: The completed sync result.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append(f"Sync {result.status.value}")
    lines.append(
        f"Updated {len(result.updated_pages)} pages, "
        f"{len(result.errors)} errors"
    )
    lines.append("")

    if result.updated_pages:
        lines.append("Updated pages:")
        for page_id in result.updated_pages:
            lines.append(f"  {page_id}")
        lines.append("")

    if result.errors:
        lines.append("Errors:")
        for error in result.errors:
            lines.append(f"  {error}")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def result_to_json(result: SyncResult) -> dict:
    """Convert a sync result to a structured dict for JSON serialisation."""
    return {
        "status": result.status.value,
        "updated_pages": list(result.updated_pages),
        "errors": list(result.errors),
        "counts": {
            "updated": len(result.updated_pages),
            "errors": len(result.errors),
        },
    }


# ------------------------------------------------------------------
# GitHub Actions outputs
# ------------------------------------------------------------------


def write_action_outputs(result: SyncResult, path: str | Path) -> None:
    """Append the run's outputs to a GitHub Actions output file.

    Writes ``status`` and ``updated_pages`` always, ``errors`` only when
    the run recorded any.  List values are JSON encoded on one line.

    Args:
        result: The completed sync result.
        path: Usually the value of ``$GITHUB_OUTPUT``.
    """
    outputs = {
        "status": result.status.value,
        "updated_pages": json.dumps(result.updated_pages),
    }
    if result.errors:
        outputs["errors"] = json.dumps(result.errors)

    with open(path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(f"{name}={value}\n")
