"""Client for the Snap.as photo API.

Snap.as shares its access token with Write.as, so the token obtained by
``WriteAsClient.login()`` is reused here.
"""

import logging
from pathlib import Path
from typing import Any

import requests

from ..errors import DecodeError
from ..file_handler import write_stream
from ..sync.models import RemoteImage
from .http import DEFAULT_TIMEOUT, create_session, send, unwrap_envelope

logger = logging.getLogger(__name__)

DEFAULT_SNAPAS_ENDPOINT = "https://snap.as/api"

# Public URL prefix of every photo hosted on Snap.as
SNAPAS_URL_PREFIX = "https://i.snap.as/"


def parse_photo(data: Any) -> RemoteImage:
    """Convert one photo object from the API into a ``RemoteImage``.

    Raises:
        DecodeError: If the photo has no URL.
    """
    if not isinstance(data, dict) or not data.get("url"):
        raise DecodeError("Malformed photo in response: missing 'url'")
    try:
        size = int(data.get("size") or 0)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Malformed photo size: {data.get('size')!r}") from exc
    return RemoteImage(
        url=data["url"],
        filename=data.get("filename") or "",
        size=size,
    )


class SnapAsClient:
    def __init__(
        self,
        token: str,
        endpoint: str = DEFAULT_SNAPAS_ENDPOINT,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or create_session()
        # Snap.as expects the bare token, without a scheme
        self.session.headers["Authorization"] = token
        # Photos are public, the API token is not sent to the CDN
        self.public_session = create_session()

    def list_photos(self) -> list[RemoteImage]:
        """
        List all photos of the authenticated user.

        Raises:
            TransportError: On network, HTTP or authentication errors
            DecodeError: If the response is malformed
        """
        response = send(
            self.session,
            "GET",
            f"{self.endpoint}/me/photos",
            timeout=self.timeout,
        )
        data = unwrap_envelope(response)
        if data is None:
            return []
        if not isinstance(data, list):
            raise DecodeError("Photo listing is not a list")
        return [parse_photo(p) for p in data]

    def upload_photo(self, path: Path, tag: str) -> RemoteImage:
        """
        Upload a local file, recording ``tag`` as the photo's filename.

        Args:
            path: Local file to upload
            tag: Filename sent in the multipart form; the store keeps it
                and returns it in later listings

        Returns:
            The created photo
        """
        logger.debug("Uploading %s as %r", path, tag)
        with open(path, "rb") as fh:
            response = send(
                self.session,
                "POST",
                f"{self.endpoint}/photos/upload",
                files={"file": (tag, fh)},
                ok=(201,),
                timeout=self.timeout,
            )
        return parse_photo(unwrap_envelope(response))

    def download(self, url: str, dest: Path) -> int:
        """Stream the photo at ``url`` into ``dest``; returns bytes written."""
        response = send(
            self.public_session,
            "GET",
            url,
            stream=True,
            timeout=self.timeout,
        )
        with response:
            return write_stream(dest, response.iter_content(chunk_size=65536))
