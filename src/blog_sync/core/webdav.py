"""Minimal WebDAV client built on requests.

Only the handful of verbs the image store needs are implemented:
PROPFIND (listing and stat), GET (streamed), PUT and MKCOL.  Paths are
slash-separated and relative to the endpoint URL.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import BinaryIO
from urllib.parse import quote, unquote, urlparse
from xml.etree import ElementTree

import requests

from ..errors import DecodeError, NotFoundError
from .http import DEFAULT_TIMEOUT, create_session, send

logger = logging.getLogger(__name__)

_DAV = "{DAV:}"

_PROPFIND_BODY = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<d:propfind xmlns:d="DAV:"><d:prop>'
    "<d:resourcetype/><d:getcontentlength/><d:getlastmodified/>"
    "</d:prop></d:propfind>"
)


@dataclass(frozen=True)
class WebDAVEntry:
    """One file or collection reported by the server."""

    name: str
    is_dir: bool
    size: int = 0
    mtime: datetime | None = None


class WebDAVClient:
    def __init__(
        self,
        endpoint: str,
        username: str | None = None,
        password: str | None = None,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        auth = (username, password) if username else None
        self.session = session or create_session(auth=auth)

    def _url(self, path: str, is_dir: bool = False) -> str:
        path = path.strip("/")
        url = f"{self.endpoint}/{quote(path)}" if path else self.endpoint
        if is_dir:
            url += "/"
        return url

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Check that the endpoint is reachable and the credentials work."""
        self._propfind("", depth=0, is_dir=True)
        logger.debug("Connected to WebDAV endpoint %s", self.endpoint)

    def list_directory(self, path: str) -> list[WebDAVEntry]:
        """
        List the direct children of the collection at ``path``.

        Names are returned exactly as the server reports them (URL-decoded);
        callers must not trust them as path components.
        """
        url = self._url(path, is_dir=True)
        own_path = unquote(urlparse(url).path).rstrip("/")
        entries = []
        for href, entry in self._propfind(path, depth=1, is_dir=True):
            if unquote(urlparse(href).path).rstrip("/") == own_path:
                continue
            entries.append(entry)
        return entries

    def stat(self, path: str) -> WebDAVEntry:
        """Return size and modification time of the file at ``path``."""
        results = self._propfind(path, depth=0)
        if not results:
            raise NotFoundError(f"WebDAV file '{path}'")
        return results[0][1]

    def read_file(self, path: str) -> Iterator[bytes]:
        """Stream the content of the file at ``path`` in chunks."""
        response = send(
            self.session,
            "GET",
            self._url(path),
            stream=True,
            timeout=self.timeout,
        )
        return _iter_chunks(response)

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def write_file(self, path: str, data: BinaryIO) -> None:
        """Upload ``data`` to ``path``, creating parent collections."""
        parts = path.strip("/").split("/")[:-1]
        for i in range(1, len(parts) + 1):
            self.make_collection("/".join(parts[:i]))

        send(
            self.session,
            "PUT",
            self._url(path),
            data=data,
            ok=(200, 201, 204),
            timeout=self.timeout,
        )

    def make_collection(self, path: str) -> None:
        """Create the collection at ``path``; an existing one is fine."""
        send(
            self.session,
            "MKCOL",
            self._url(path, is_dir=True),
            ok=(201, 405),
            timeout=self.timeout,
        )

    # ------------------------------------------------------------------
    # PROPFIND parsing
    # ------------------------------------------------------------------

    def _propfind(
        self, path: str, depth: int, is_dir: bool = False
    ) -> list[tuple[str, WebDAVEntry]]:
        response = send(
            self.session,
            "PROPFIND",
            self._url(path, is_dir=is_dir),
            data=_PROPFIND_BODY,
            headers={
                "Depth": str(depth),
                "Content-Type": "application/xml; charset=utf-8",
            },
            ok=(207, 404),
            timeout=self.timeout,
        )
        if response.status_code == 404:
            raise NotFoundError(f"WebDAV path '{path or '/'}'")
        return parse_multistatus(response.content)


def parse_multistatus(content: bytes) -> list[tuple[str, WebDAVEntry]]:
    """Parse a 207 Multi-Status body into ``(href, entry)`` pairs.

    Raises:
        DecodeError: If the body is not well-formed XML.
    """
    try:
        tree = ElementTree.fromstring(content)
    except ElementTree.ParseError as exc:
        raise DecodeError(f"Malformed PROPFIND response: {exc}") from exc

    results = []
    for response in tree.findall(f"{_DAV}response"):
        href = response.findtext(f"{_DAV}href")
        if not href:
            continue
        prop = response.find(f".//{_DAV}prop")
        if prop is None:
            continue

        is_dir = prop.find(f"{_DAV}resourcetype/{_DAV}collection") is not None
        length = prop.findtext(f"{_DAV}getcontentlength")
        modified = prop.findtext(f"{_DAV}getlastmodified")

        try:
            size = int(length) if length else 0
            mtime = parsedate_to_datetime(modified) if modified else None
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Malformed properties for {href}: {exc}") from exc

        # Decode the last segment only, an encoded "%2F" must survive as "/"
        name = unquote(urlparse(href).path.rstrip("/").rsplit("/", 1)[-1])
        results.append(
            (href, WebDAVEntry(name=name, is_dir=is_dir, size=size, mtime=mtime))
        )
    return results


def _iter_chunks(response: requests.Response) -> Iterator[bytes]:
    with response:
        yield from response.iter_content(chunk_size=65536)
