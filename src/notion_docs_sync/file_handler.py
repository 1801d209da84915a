"""File handler module: source validation and encoding-aware reads.

Markdown sources may come from editors that do not write UTF-8, so files
are read as bytes and decoded with charset-normalizer.
"""

from pathlib import Path

from charset_normalizer import from_bytes


def validate_source_dir(path_str: str | Path) -> Path:
    """Validate and resolve the markdown source directory.

    Args:
        path_str: Path (absolute or relative to CWD) to an existing directory.

    Returns:
        Resolved Path object.

    Raises:
        ValueError: If the path does not exist or is not a directory.
    """
    path = Path(path_str).expanduser()
    resolved = path.resolve()
    if not resolved.exists():
        raise ValueError(f"Source directory not found: {path_str}")
    if not resolved.is_dir():
        raise ValueError(f"Source path is not a directory: {path_str}")
    return resolved


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        # ascii is a strict subset of utf-8
        if encoding == "ascii":
            encoding = "utf-8"
        content = str(result)
    # A UTF-8 BOM would otherwise end up in the first block's text
    return (content.lstrip("\ufeff"), encoding)
