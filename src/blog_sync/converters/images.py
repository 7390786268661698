"""Image reference discovery in Markdown posts using the mistune AST.

Posts are parsed once with ``mistune`` in AST mode (no renderer) and the
token tree is walked depth-first in document order.  Two walks are
provided:

- ``scan_post()`` collects the local images a post references, together
  with the post title, for the upload direction.
- ``scan_for_download()`` hands every image destination to an image store
  and returns the link replacements for the download direction.
"""

import logging
import posixpath
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import unquote, urlparse

import mistune
from mistune.renderers.markdown import MarkdownRenderer

from ..sync.models import LocalImage
from ..validators import is_image_file, sanitize_relative_path

logger = logging.getLogger(__name__)


class ImageDownloader(Protocol):
    """The part of an image store used by ``scan_for_download``."""

    def ensure_downloaded(self, url: str, date_part: str, slug: str) -> str: ...


def parse_markdown(text: str) -> tuple[list[dict[str, Any]], Any]:
    """Parse Markdown into mistune AST tokens and the block state."""
    markdown = mistune.create_markdown(
        renderer=None, plugins=["table", "strikethrough"]
    )
    return markdown.parse(text)


def walk_tokens(tokens: list[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    """Yield every token of the tree, depth-first, in document order."""
    for token in tokens:
        yield token
        children = token.get("children")
        if children:
            yield from walk_tokens(children)


def render_title(heading: dict[str, Any], state: Any) -> str:
    """Render a heading token back to Markdown and strip the ``#`` marker."""
    text = MarkdownRenderer().render_tokens([heading], state)
    return text.strip().lstrip("#").strip()


def scan_post(markdown: str, post_root: Path) -> tuple[list[LocalImage], str]:
    """
    Extract the title and the local images referenced by a post.

    Args:
        markdown: Post content
        post_root: Directory that image destinations are relative to

    Returns:
        Tuple of (images in document order, title). The title is the text
        of the first level-1 heading, or "" when there is none.

    Raises:
        UnsafePathError: If an image destination could escape ``post_root``
    """
    tokens, state = parse_markdown(markdown)

    title = ""
    images: list[LocalImage] = []
    for token in walk_tokens(tokens):
        if token["type"] == "heading" and not title:
            if token.get("attrs", {}).get("level") == 1:
                title = render_title(token, state)
        elif token["type"] == "image":
            image = _local_image(token["attrs"]["url"], post_root)
            if image is not None:
                images.append(image)
    return images, title


def _local_image(url: str, post_root: Path) -> LocalImage | None:
    # mistune percent-encodes destinations; the file system wants them decoded
    raw = unquote(url)
    if not is_image_file(raw):
        return None
    if urlparse(raw).scheme:
        return None

    clean = sanitize_relative_path(posixpath.normpath(raw), allow_absolute=True)
    if not clean:
        logger.debug("Ignoring absolute image path %s", raw)
        return None

    full_path = post_root / clean
    try:
        st = full_path.stat()
    except OSError:
        logger.debug("Referenced image %s does not exist", full_path)
        return None

    return LocalImage(
        rel_path=raw,
        clean_path=clean,
        full_path=str(full_path),
        size=st.st_size,
        mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
    )


def scan_for_download(
    markdown: str, store: ImageDownloader, date_part: str, slug: str
) -> dict[str, str]:
    """
    Materialize the images of a remote post through ``store``.

    Returns:
        Mapping of old (percent-decoded) link to new local path for every
        image the store took responsibility for. Links the store does not recognize are
        left out.
    """
    tokens, _ = parse_markdown(markdown)

    links: dict[str, str] = {}
    for token in walk_tokens(tokens):
        if token["type"] != "image":
            continue
        url = token["attrs"]["url"]
        # Keyed by the decoded destination, as ``rewrite_links`` expects
        key = unquote(url)
        if key in links or not is_image_file(key):
            continue
        new_link = store.ensure_downloaded(url, date_part, slug)
        if new_link:
            links[key] = new_link
    return links
