"""Discovery of the local post files."""

import logging
import re
from pathlib import Path

from ..converters.images import scan_post
from ..file_handler import file_times, read_file_with_encoding
from .models import LocalPost

logger = logging.getLogger(__name__)

# YYYY-MM-DD-<slug>.md
POST_FILENAME_RE = re.compile(r"(\d{4}-\d{2}-\d{2})-(.+)\.md")


def parse_post_filename(name: str) -> tuple[str, str] | None:
    """Split a post filename into ``(date_part, slug)``, or None."""
    match = POST_FILENAME_RE.fullmatch(name)
    if match is None:
        return None
    return match.group(1), match.group(2)


def discover_local_posts(root_dir: Path) -> dict[str, LocalPost]:
    """
    Scan ``root_dir`` (not recursively) for post files.

    Files are visited in name order; when two files share a slug the later
    one wins.

    Returns:
        Local posts keyed by slug

    Raises:
        UnsafePathError: If a post references an image outside the root
        OSError: If a post cannot be read
    """
    posts: dict[str, LocalPost] = {}
    for path in sorted(root_dir.iterdir(), key=lambda p: p.name):
        parsed = parse_post_filename(path.name)
        if parsed is None or not path.is_file():
            continue
        date_part, slug = parsed

        content, encoding = read_file_with_encoding(path)
        if encoding != "utf-8":
            logger.debug("Read %s as %s", path.name, encoding)
        images, title = scan_post(content, root_dir)
        ctime, mtime = file_times(path)

        if slug in posts:
            logger.warning(
                "Duplicate slug %r: %s replaces %s",
                slug,
                path.name,
                posts[slug].filename,
            )
        posts[slug] = LocalPost(
            filename=path.name,
            date_part=date_part,
            slug=slug,
            images=images,
            ctime=ctime,
            mtime=mtime,
            content=content,
            title=title,
        )
    return posts
