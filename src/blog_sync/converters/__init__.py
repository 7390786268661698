"""Markdown processing for posts: image discovery and content rewriting."""

from .content import (
    DISCUSS_FOOTER_RE,
    prepend_title,
    rewrite_links,
    strip_discuss_footer,
    strip_title,
)
from .images import ImageDownloader, parse_markdown, scan_for_download, scan_post

__all__ = [
    "DISCUSS_FOOTER_RE",
    "ImageDownloader",
    "parse_markdown",
    "prepend_title",
    "rewrite_links",
    "scan_for_download",
    "scan_post",
    "strip_discuss_footer",
    "strip_title",
]
