"""
Input validation for paths and names that end up on the local disk.

Anything supplied from outside the post directory (Markdown image
destinations, names returned by an image store listing, remote post
slugs) goes through these functions before it is joined to a local path.
The checks are deliberately conservative: some legal inputs are rejected
so that no input can escape the root directory.
"""

import posixpath

from blog_sync.errors import InvalidPathError, UnsafePathError

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg"})


def sanitize_relative_path(path: str, allow_absolute: bool = False) -> str:
    """
    Make sure ``path`` is relative and cannot point outside its root.

    Args:
        path: Slash-separated candidate path
        allow_absolute: When True, an absolute path is not an error but is
            reported as "nothing to do" by returning an empty string

    Returns:
        The unchanged path if it is safe, or "" for a tolerated absolute path

    Raises:
        InvalidPathError: If the path is empty
        UnsafePathError: If the path is absolute (and not allowed) or has
            a "." or ".." component
    """
    if not path:
        raise InvalidPathError(path)

    if posixpath.isabs(path):
        if allow_absolute:
            return ""
        raise UnsafePathError(path, "absolute path")

    for component in path.split("/"):
        if component in (".", ".."):
            raise UnsafePathError(path, "contains '.' or '..'")

    return path


def validate_slug(slug: str) -> str:
    """
    Validate a post slug before it becomes part of a filename.

    Slugs come from the remote service, so they are untrusted.

    Raises:
        UnsafePathError: If the slug is empty, contains a path separator,
            or is "." or ".."
    """
    if not slug or not slug.strip():
        raise UnsafePathError(slug, "empty slug")
    if "/" in slug or "\\" in slug:
        raise UnsafePathError(slug, "slug contains a path separator")
    if slug in (".", ".."):
        raise UnsafePathError(slug, "slug is a relative directory name")
    return slug


def is_image_file(name: str) -> bool:
    """Return True if ``name`` has a known raster or vector image extension."""
    return posixpath.splitext(name)[1].lower() in IMAGE_EXTENSIONS
