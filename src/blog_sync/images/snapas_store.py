"""Image store backed by the Snap.as photo service.

Snap.as has a flat namespace of opaque URLs.  To find an uploaded image
again, its post-relative path is stored in the photo's filename, escaped
so that it survives as a single name::

    img/cat.png  ->  ¬img¦cat.png
"""

import logging
import posixpath
from pathlib import Path
from urllib.parse import urlparse

from ..core.snapas import SNAPAS_URL_PREFIX, SnapAsClient
from ..errors import InvalidPathError
from ..sync.models import LocalImage, RemoteImage
from ..validators import sanitize_relative_path

logger = logging.getLogger(__name__)

# "not sign", marks names written by this tool
ESCAPE_MARKER = "¬"

# "broken bar", stands in for "/"
SEPARATOR_ESCAPE = "¦"


def encode_image_identity(path: str) -> str:
    """Encode a post-relative path as a flat photo filename."""
    return ESCAPE_MARKER + path.replace("/", SEPARATOR_ESCAPE)


def decode_image_identity(name: str) -> str:
    """
    Decode a photo filename written by ``encode_image_identity``.

    Raises:
        InvalidPathError: If ``name`` does not carry the escape marker
        UnsafePathError: If the decoded path could escape the root
    """
    if not name.startswith(ESCAPE_MARKER):
        raise InvalidPathError(name, "not an escaped image identity")
    path = name[len(ESCAPE_MARKER):].replace(SEPARATOR_ESCAPE, "/")
    return sanitize_relative_path(path)


class SnapAsImageStore:
    def __init__(self, client: SnapAsClient, root_dir: Path):
        self.client = client
        self.root_dir = Path(root_dir)
        self.by_url: dict[str, RemoteImage] = {}
        self.by_filename: dict[str, RemoteImage] = {}
        self.uploaded: list[str] = []
        self.downloaded: list[str] = []

    def build_index(self) -> None:
        for photo in self.client.list_photos():
            self._remember(photo)
        logger.info("Found %d remote images", len(self.by_url))

    def _remember(self, photo: RemoteImage) -> None:
        self.by_url[photo.url] = photo
        if photo.filename:
            self.by_filename[photo.filename] = photo

    def ensure_uploaded(self, image: LocalImage) -> str:
        identity = encode_image_identity(image.clean_path)
        existing = self.by_filename.get(identity)
        if existing is not None:
            return existing.url

        # Photos uploaded by other tools are only known by their URL
        existing = self.by_url.get(
            SNAPAS_URL_PREFIX + posixpath.basename(image.clean_path)
        )
        if existing is not None:
            return existing.url

        logger.warning("Uploading a new image %s", image.rel_path)
        photo = self.client.upload_photo(Path(image.full_path), identity)
        # The size reported by the service is not that of the original file
        photo = photo.model_copy(update={"filename": identity, "size": image.size})
        self._remember(photo)
        self.uploaded.append(photo.url)
        return photo.url

    def ensure_downloaded(self, url: str, date_part: str, slug: str) -> str:
        if not url.startswith(SNAPAS_URL_PREFIX):
            return ""

        photo = self.by_url.get(url)
        if photo is None or not photo.filename.startswith(ESCAPE_MARKER):
            # Not ours: keep it next to the post
            name = sanitize_relative_path(posixpath.basename(urlparse(url).path))
            rel_path = f"{date_part}-{slug}/{name}"
        else:
            rel_path = decode_image_identity(photo.filename)

        dest = self.root_dir / rel_path
        if dest.exists():
            logger.info("The image %s already exists", rel_path)
            return rel_path

        logger.info("Downloading image %s to %s", url, rel_path)
        self.client.download(url, dest)
        self.downloaded.append(rel_path)
        return rel_path
