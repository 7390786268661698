"""Build the configured image store."""

import logging

from ..config import Settings
from ..core.http import create_session
from ..core.snapas import SnapAsClient
from ..core.webdav import WebDAVClient
from ..errors import ConfigError
from .base import ImageStore
from .snapas_store import SnapAsImageStore
from .webdav_store import WebDAVImageStore

logger = logging.getLogger(__name__)


def create_image_store(settings: Settings, token: str) -> ImageStore:
    """
    Create the image store selected by ``settings.image_hosting``.

    Args:
        settings: Validated settings
        token: Access token from the blog login; Snap.as accepts the same
            token

    Raises:
        ConfigError: If the backend name is unknown
        TransportError: If the WebDAV server cannot be reached
    """
    verify = not settings.insecure

    if settings.image_hosting == "snapas":
        client = SnapAsClient(
            token,
            endpoint=settings.snapas_endpoint,
            timeout=settings.timeout,
            session=create_session(verify=verify),
        )
        return SnapAsImageStore(client, settings.root_dir)

    if settings.image_hosting == "webdav":
        auth = None
        if settings.image_login:
            auth = (settings.image_login, settings.image_password)
        client = WebDAVClient(
            settings.webdav_endpoint,
            timeout=settings.timeout,
            session=create_session(auth=auth, verify=verify),
        )
        logger.info("Connecting to WebDAV at %s", settings.webdav_endpoint)
        client.connect()
        return WebDAVImageStore(
            client, settings.root_dir, settings.webdav_published_url
        )

    raise ConfigError(f"Invalid image hosting type '{settings.image_hosting}'")
