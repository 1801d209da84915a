"""Markdown tree discovery.

Walks a source directory and collects every markdown file together with
the title it will carry in Notion:

- a regular file is titled by its filename stem,
- a ``README.md`` (any case) is titled by its containing directory.

The root directory's README is returned separately as ``readme``; a
README found in a subdirectory is listed after that subdirectory's other
files.  Entries are visited in sorted name order so runs are repeatable.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from notion_docs_sync.file_handler import (
    read_file_with_encoding,
    validate_source_dir,
)
from notion_docs_sync.sync.models import DirectoryContent, MarkdownFile

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
README_STEM = "readme"


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() == MARKDOWN_SUFFIX


def is_readme(path: Path) -> bool:
    return is_markdown(path) and path.stem.lower() == README_STEM


def title_for(path: Path) -> str:
    """Notion page title for a markdown file."""
    if is_readme(path):
        return path.resolve().parent.name
    return path.stem


def load_markdown_file(path: Path) -> MarkdownFile:
    content, encoding = read_file_with_encoding(path)
    logger.debug("Read %s (%s, %d chars)", path, encoding, len(content))
    try:
        relative = os.path.relpath(path)
    except ValueError:
        # Different drive on Windows
        relative = str(path)
    return MarkdownFile(
        path=str(path),
        relative_path=relative,
        title=title_for(path),
        content=content,
    )


def _walk(directory: Path) -> DirectoryContent:
    files: list[MarkdownFile] = []
    directories: list[str] = []
    readme: MarkdownFile | None = None

    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            directories.append(str(entry))
            sub = _walk(entry)
            logger.debug(
                "Subdirectory %s contained %d markdown files",
                entry.name,
                len(sub.files),
            )
            files.extend(sub.files)
            directories.extend(sub.directories)
            if sub.readme is not None:
                files.append(sub.readme)
        elif entry.is_file() and is_markdown(entry):
            markdown_file = load_markdown_file(entry)
            if is_readme(entry):
                readme = markdown_file
            else:
                files.append(markdown_file)
        else:
            logger.debug("Skipping non-markdown entry: %s", entry.name)

    return DirectoryContent(files=files, directories=directories, readme=readme)


def discover(root: str | Path) -> DirectoryContent:
    """Collect the markdown tree under *root*.

    Raises:
        ValueError: If *root* is not an existing directory.
        OSError: If a file or directory cannot be read.
    """
    source = validate_source_dir(root)
    logger.debug("Processing directory: %s", source)
    content = _walk(source)
    logger.debug(
        "Directory %s processing complete. Found %d files%s",
        source,
        len(content.files),
        " (plus README)" if content.readme else "",
    )
    return content
