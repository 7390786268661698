"""Sync engine: reconciles the local post directory with the blog.

One run goes through four strictly sequential phases:

1. Build the image store index and discover the local posts.
2. Fetch every page of remote posts.
3. Download (optional): write remote posts that are new or newer than
   their local copy, materializing their images.
4. Upload (optional): publish local images, then create or update the
   remote posts that are new or newer than their remote copy.

Conflicts are settled by modification time (last writer wins) with a
small tolerance for clock skew.  Download runs before upload.  Any error
aborts the run where it happens; writes already done are kept.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ..converters.content import (
    prepend_title,
    rewrite_links,
    strip_discuss_footer,
    strip_title,
)
from ..converters.images import scan_for_download
from ..core.retry import RetryPolicy
from ..core.writeas import PostParams, WriteAsClient
from ..file_handler import write_file
from ..images.base import ImageStore
from ..validators import validate_slug
from .local import discover_local_posts
from .models import (
    LocalPost,
    RemotePost,
    SyncAction,
    SyncReport,
    SyncResult,
)

logger = logging.getLogger(__name__)

# Timestamps closer than this are considered equal
ALLOWED_TIMESTAMP_SKEW = timedelta(seconds=2)

# New posts are dated at noon UTC of their filename date
NEW_POST_TIME = "T12:00:00"


class SyncEngine:
    """Synchronize one local directory with one remote collection.

    Args:
        client: Logged-in blog API client.
        image_store: Image store backend.
        root_dir: Directory holding the ``YYYY-MM-DD-<slug>.md`` files.
        collection: Alias of the remote collection.
        retry: Policy for listing and writing remote posts.
    """

    def __init__(
        self,
        client: WriteAsClient,
        image_store: ImageStore,
        root_dir: Path,
        collection: str,
        retry: RetryPolicy | None = None,
    ) -> None:
        self.client = client
        self.image_store = image_store
        self.root_dir = Path(root_dir)
        self.collection = collection
        self.retry = retry or RetryPolicy()

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self, download: bool = True, upload: bool = True) -> SyncReport:
        """Execute a sync run.

        Args:
            download: Pull new and changed remote posts.
            upload: Push new and changed local posts and images.

        Returns:
            A ``SyncReport`` of what was done.
        """
        started_at = datetime.now(timezone.utc).isoformat()

        logger.info("Retrieving remote image names")
        self.image_store.build_index()

        logger.info("Enumerating local posts in %s", self.root_dir)
        local_posts = discover_local_posts(self.root_dir)
        logger.info("Found %d local posts", len(local_posts))

        logger.info("Fetching the remote posts")
        remote_posts = self.load_remote_posts()
        logger.info("Found %d remote posts", len(remote_posts))

        results: list[SyncResult] = []
        if download:
            logger.info("Downloading new or changed remote posts")
            results.extend(
                self.download_posts(
                    remote_posts, local_posts, record_skips=not upload
                )
            )

        if upload:
            logger.info("Uploading new or changed images")
            image_urls = self.upload_images(local_posts)

            logger.info("Uploading new or changed local posts")
            results.extend(
                self.upload_posts(local_posts, remote_posts, image_urls)
            )

        return SyncReport(
            collection=self.collection,
            download=download,
            upload=upload,
            results=results,
            uploaded_images=list(self.image_store.uploaded),
            downloaded_images=list(self.image_store.downloaded),
            local_posts=len(local_posts),
            remote_posts=len(remote_posts),
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )

    # ------------------------------------------------------------------
    # Remote discovery
    # ------------------------------------------------------------------

    def load_remote_posts(self) -> list[RemotePost]:
        """Fetch pages 1, 2, ... until an empty page comes back."""
        posts: list[RemotePost] = []
        page = 1
        while True:
            logger.debug("Fetching page %d", page)
            batch = self.retry.call(self.client.list_posts, self.collection, page)
            if not batch:
                break
            posts.extend(batch)
            page += 1
        return posts

    # ------------------------------------------------------------------
    # Download direction
    # ------------------------------------------------------------------

    def download_posts(
        self,
        remote_posts: list[RemotePost],
        local_posts: dict[str, LocalPost],
        record_skips: bool = False,
    ) -> list[SyncResult]:
        results = []
        for remote in remote_posts:
            slug = validate_slug(remote.slug)
            local = local_posts.get(slug)

            if local is None:
                logger.info("New remote post %s", slug)
                action = SyncAction.CREATE_LOCAL
            elif local.mtime - remote.updated < -ALLOWED_TIMESTAMP_SKEW:
                logger.info(
                    "Post %s has been updated on the server, syncing locally", slug
                )
                action = SyncAction.PULL
            else:
                if record_skips:
                    results.append(
                        SyncResult(
                            slug=slug,
                            local_path=local.filename,
                            action=SyncAction.SKIP,
                        )
                    )
                continue

            filename = self.write_local_post(remote, local)
            results.append(
                SyncResult(slug=slug, local_path=filename, action=action)
            )
        return results

    def write_local_post(self, remote: RemotePost, local: LocalPost | None) -> str:
        """Write ``remote`` to its local file and return the file name."""
        if local is not None:
            # Keep the local date, it may differ from the remote one
            date_part = local.date_part
        else:
            date_part = remote.created.astimezone(timezone.utc).strftime("%Y-%m-%d")

        links = scan_for_download(remote.body, self.image_store, date_part, remote.slug)
        content = rewrite_links(remote.body, links)
        content = strip_discuss_footer(content)
        # The title is sent separately on upload, put it back
        content = prepend_title(content, remote.title)

        filename = f"{date_part}-{remote.slug}.md"
        write_file(self.root_dir / filename, content, mtime=remote.updated)
        return filename

    # ------------------------------------------------------------------
    # Upload direction
    # ------------------------------------------------------------------

    def upload_images(self, local_posts: dict[str, LocalPost]) -> dict[str, str]:
        """Publish every distinct local image; returns link -> URL."""
        urls: dict[str, str] = {}
        for post in local_posts.values():
            for image in post.images:
                if image.rel_path in urls:
                    continue
                urls[image.rel_path] = self.image_store.ensure_uploaded(image)
        return urls

    def upload_posts(
        self,
        local_posts: dict[str, LocalPost],
        remote_posts: list[RemotePost],
        image_urls: dict[str, str],
    ) -> list[SyncResult]:
        remotes = {post.slug: post for post in remote_posts}

        results = []
        for post in local_posts.values():
            remote = remotes.get(post.slug)
            if remote is None:
                logger.info("Uploading new local post %s", post.slug)
                self.create_remote_post(post, image_urls)
                action = SyncAction.CREATE_REMOTE
            elif post.mtime - remote.updated > ALLOWED_TIMESTAMP_SKEW:
                logger.info(
                    "Post %s has been updated locally, updating on the server",
                    post.slug,
                )
                self.update_remote_post(post, remote, image_urls)
                action = SyncAction.PUSH
            else:
                logger.info("Up-to-date post %s", post.slug)
                action = SyncAction.SKIP

            results.append(
                SyncResult(slug=post.slug, local_path=post.filename, action=action)
            )
        return results

    def _outgoing_body(self, post: LocalPost, image_urls: dict[str, str]) -> str:
        links = {
            image.rel_path: image_urls[image.rel_path]
            for image in post.images
            if image.rel_path in image_urls
        }
        content = rewrite_links(post.content, links)
        return strip_title(content, post.title)

    def create_remote_post(
        self, post: LocalPost, image_urls: dict[str, str]
    ) -> RemotePost:
        created = datetime.fromisoformat(post.date_part + NEW_POST_TIME).replace(
            tzinfo=timezone.utc
        )
        params = PostParams(
            title=post.title,
            body=self._outgoing_body(post, image_urls),
            slug=post.slug,
            created=created,
        )
        return self.retry.call(self.client.create_post, self.collection, params)

    def update_remote_post(
        self, post: LocalPost, remote: RemotePost, image_urls: dict[str, str]
    ) -> RemotePost:
        params = PostParams(
            title=post.title,
            body=self._outgoing_body(post, image_urls),
            updated=post.mtime,
        )
        return self.retry.call(self.client.update_post, remote.id, params)
