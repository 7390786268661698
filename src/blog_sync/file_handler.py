"""File handler module: encoding-aware reads, writes and timestamp helpers.

Provides the local file I/O used by the sync engine and the image stores.
Callers are responsible for sanitizing paths before handing them here.
"""

import os
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from charset_normalizer import from_bytes

# =============================================================================
# File Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    # Plain UTF-8 is by far the common case for posts
    try:
        return (raw.decode("utf-8"), "utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        # Detection failed, fall back to utf-8
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        content = str(result)
    return (content, encoding)


def write_file(
    path: Path,
    content: str,
    encoding: str = "utf-8",
    mtime: datetime | None = None,
) -> int:
    """Write content to a file, creating parent directories as needed.

    An existing file is truncated.

    Args:
        path: Path to the output file.
        content: String content to write.
        encoding: Encoding to use (default: utf-8).
        mtime: If given, set as the file's modification time afterwards.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)
    path.write_bytes(encoded)
    if mtime is not None:
        set_mtime(path, mtime)
    return len(encoded)


def write_stream(
    path: Path,
    chunks: Iterable[bytes],
    mtime: datetime | None = None,
) -> int:
    """Stream chunks of bytes into a file, creating parent directories.

    The data goes to a temporary sibling first and is moved into place once
    the stream is exhausted, so a failed transfer leaves no file behind.

    Args:
        path: Path to the output file.
        chunks: Iterable of byte chunks (e.g. ``Response.iter_content()``).
        mtime: If given, set as the file's modification time afterwards.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    # Only a complete transfer ever appears under the final name
    partial = path.with_name(f".{path.name}.part")
    written = 0
    try:
        with open(partial, "wb") as fh:
            for chunk in chunks:
                if chunk:
                    fh.write(chunk)
                    written += len(chunk)
        os.replace(partial, path)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    if mtime is not None:
        set_mtime(path, mtime)
    return written


# =============================================================================
# Timestamps
# =============================================================================


def set_mtime(path: Path, mtime: datetime) -> None:
    """Set the modification time of ``path``, keeping its access time."""
    st = path.stat()
    os.utime(path, (st.st_atime, mtime.timestamp()))


def file_times(path: Path) -> tuple[datetime, datetime]:
    """Return ``(ctime, mtime)`` of a file as timezone-aware UTC datetimes.

    ctime is the birth time on platforms that record one, otherwise the
    inode change time.
    """
    st = path.stat()
    birth = getattr(st, "st_birthtime", None)
    if birth is None:
        birth = st.st_ctime
    return (
        datetime.fromtimestamp(birth, tz=timezone.utc),
        datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
    )
