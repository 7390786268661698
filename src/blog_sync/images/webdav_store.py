"""Image store backed by a WebDAV share.

The share mirrors the post tree: an image referenced as ``img/cat.png``
lives at ``img/cat.png`` below the endpoint and is published at
``<published_url>/img/cat.png``.
"""

import logging
import posixpath
from pathlib import Path
from urllib.parse import quote, unquote

from ..core.webdav import WebDAVClient
from ..errors import UnsafePathError
from ..file_handler import write_stream
from ..sync.models import LocalImage, RemoteImage
from ..validators import sanitize_relative_path

logger = logging.getLogger(__name__)


class WebDAVImageStore:
    def __init__(self, client: WebDAVClient, root_dir: Path, published_url: str):
        self.client = client
        self.root_dir = Path(root_dir)
        self.published_url = published_url.rstrip("/")
        self.index: dict[str, RemoteImage] = {}
        self.uploaded: list[str] = []
        self.downloaded: list[str] = []

    def url_for(self, path: str) -> str:
        """Public URL of the image stored at ``path``."""
        return f"{self.published_url}/{quote(path)}"

    def build_index(self) -> None:
        self._read_directory("")
        logger.info("Found %d remote images", len(self.index))

    def _read_directory(self, rel_dir: str) -> None:
        for entry in self.client.list_directory(rel_dir):
            # Names come from the server and are not trusted
            if "/" in entry.name:
                raise UnsafePathError(entry.name, "name contains a separator")
            name = sanitize_relative_path(entry.name)
            path = posixpath.join(rel_dir, name) if rel_dir else name

            if entry.is_dir:
                self._read_directory(path)
            else:
                self.index[path] = RemoteImage(
                    url=self.url_for(path),
                    filename=path,
                    size=entry.size,
                    mtime=entry.mtime,
                )

    def ensure_uploaded(self, image: LocalImage) -> str:
        path = image.clean_path
        remote = self.index.get(path)
        if (
            remote is not None
            and remote.size == image.size
            and remote.mtime is not None
            and remote.mtime >= image.mtime
        ):
            return remote.url

        logger.info(
            "Uploading new or changed image %s (%d bytes)", path, image.size
        )
        with open(image.full_path, "rb") as fh:
            self.client.write_file(path, fh)

        url = self.url_for(path)
        self.index[path] = RemoteImage(
            url=url, filename=path, size=image.size, mtime=image.mtime
        )
        self.uploaded.append(url)
        logger.info("Uploaded image %s", url)
        return url

    def ensure_downloaded(self, url: str, date_part: str, slug: str) -> str:
        prefix = self.published_url + "/"
        if not url.startswith(prefix):
            return ""

        rel_path = sanitize_relative_path(unquote(url[len(prefix):]))
        dest = self.root_dir / rel_path

        remote = self.index.get(rel_path)
        if remote is not None and dest.exists():
            st = dest.stat()
            if st.st_size == remote.size:
                logger.info("The image %s already exists", rel_path)
                return rel_path
            if remote.mtime is not None and st.st_mtime > remote.mtime.timestamp():
                logger.info(
                    "The local image %s is newer, skipping the download", rel_path
                )
                return rel_path

        entry = self.client.stat(rel_path)
        logger.info("Downloading image %s", rel_path)
        write_stream(dest, self.client.read_file(rel_path), mtime=entry.mtime)

        self.index[rel_path] = RemoteImage(
            url=url, filename=rel_path, size=entry.size, mtime=entry.mtime
        )
        self.downloaded.append(rel_path)
        return rel_path
