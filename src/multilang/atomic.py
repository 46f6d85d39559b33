"""Atomic file replacement.

Files are written with the write-to-temp-then-rename pattern:

1. Write to a temporary file in the target's directory
2. Sync the temp file to disk
3. Atomically replace the target with the temp file

If any step fails, the original file remains unchanged and the temp file
is removed.

Example:
    >>> atomic_write(Path("translations/languages.json"), json.dumps(data))
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def _sync_file(path: Path) -> None:
    """Sync file to disk."""
    fd = os.open(str(path), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def atomic_write(path: Path | str, content: bytes | str, sync: bool = True) -> int:
    """Atomically replace ``path`` with ``content``.

    Missing parent directories are created.

    Args:
        path: Target file path.
        content: Content to write; strings are encoded as UTF-8.
        sync: Whether to fsync the temp file before the rename.

    Returns:
        Number of bytes written.

    Raises:
        OSError: If the temp file cannot be written or renamed.
    """
    path = Path(path)
    if isinstance(content, str):
        content = content.encode("utf-8")

    path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory so the rename stays on one filesystem
    fd, temp_name = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)

        if sync:
            _sync_file(temp_path)

        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    return len(content)
