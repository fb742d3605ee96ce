"""Whole-file JSON persistence shared by the lock file and version chain.

Both artifacts are always rewritten in full.  Writes go to a temporary file
in the target directory and are moved into place with :func:`os.replace`, so
a crash mid-write leaves the previous file intact rather than a truncated
one.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def read_json_document(path: str | Path) -> Any | None:
    """Read and parse a JSON file.

    Returns
    -------
    Any | None
        The parsed document, or ``None`` when the file does not exist.

    Raises
    ------
    json.JSONDecodeError
        If the file exists but is not valid JSON.
    OSError
        For any I/O failure other than the file being absent.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return json.loads(content)


def render_json_document(document: Any) -> str:
    """Pretty-print *document* with 2-space indentation and a trailing newline."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def atomic_write_text(path: str | Path, content: str) -> None:
    """Replace the file at *path* with *content* atomically."""
    target = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %d bytes to %s", len(content), target)
