"""Pydantic models for the sync engine.

Defines the data contracts shared by the scanner, the image stores and
the engine:

- ``LocalImage``: An image referenced by a local post.
- ``LocalPost``: A ``YYYY-MM-DD-<slug>.md`` file found in the root directory.
- ``RemotePost``: A post fetched from the blog service.
- ``RemoteImage``: An image known to the remote image store.
- ``SyncAction``: Enum of possible per-post operations.
- ``SyncResult``: Outcome for one post.
- ``SyncReport``: Aggregate results for a full sync run.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class LocalImage(BaseModel):
    """An image file referenced from a local post.

    Attributes:
        rel_path: The Markdown link destination, percent-decoded.
        clean_path: Normalized post-relative path, the image's identity.
        full_path: Absolute path of the file on disk.
        size: File size in bytes.
        mtime: File modification time.
    """

    rel_path: str
    clean_path: str
    full_path: str
    size: int
    mtime: datetime

    model_config = {"frozen": True}


class LocalPost(BaseModel):
    """A post file in the local root directory.

    Attributes:
        filename: Base name of the file (``YYYY-MM-DD-<slug>.md``).
        date_part: The ``YYYY-MM-DD`` prefix of the filename.
        slug: Post identifier, the join key with remote posts.
        images: Local images referenced by the post, in document order.
        ctime: File creation (birth) time.
        mtime: File modification time.
        content: Raw Markdown content.
        title: Text of the first level-1 heading, or "".
    """

    filename: str
    date_part: str
    slug: str
    images: list[LocalImage] = []
    ctime: datetime
    mtime: datetime
    content: str
    title: str = ""

    model_config = {"frozen": True}


class RemotePost(BaseModel):
    """A post as returned by the blog service."""

    id: str
    slug: str
    title: str = ""
    body: str = ""
    created: datetime
    updated: datetime

    model_config = {"frozen": True}


class RemoteImage(BaseModel):
    """An image present in the remote image store.

    Attributes:
        url: Public URL of the image.
        filename: Name recorded by the store; carries the escaped identity
            on the object-store backend.
        size: Size in bytes as known to us.
        mtime: Modification time reported by the store, when it has one.
    """

    url: str
    filename: str = ""
    size: int = 0
    mtime: datetime | None = None

    model_config = {"frozen": True}


class SyncAction(str, Enum):
    """Possible sync operations for one post."""

    SKIP = "skip"
    PUSH = "push"
    PULL = "pull"
    CREATE_REMOTE = "create_remote"
    CREATE_LOCAL = "create_local"


class SyncResult(BaseModel):
    """Result of syncing one post.

    Attributes:
        slug: Post slug.
        local_path: File name relative to the root directory.
        action: Sync action that was performed.
    """

    slug: str
    local_path: str
    action: SyncAction

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a full sync run.

    Attributes:
        collection: Alias of the remote collection.
        download: Whether the download direction ran.
        upload: Whether the upload direction ran.
        results: Per-post results, download results first.
        uploaded_images: URLs of images uploaded during the run.
        downloaded_images: Local paths of images written during the run.
        local_posts: Number of local posts discovered.
        remote_posts: Number of remote posts discovered.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run completed.
    """

    collection: str
    download: bool = True
    upload: bool = True
    results: list[SyncResult] = []
    uploaded_images: list[str] = []
    downloaded_images: list[str] = []
    local_posts: int = 0
    remote_posts: int = 0
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def created_local(self) -> list[SyncResult]:
        """Results where action is CREATE_LOCAL."""
        return [
            r
            for r in self.results
            if r.action == SyncAction.CREATE_LOCAL
        ]

    @property
    def created_remote(self) -> list[SyncResult]:
        """Results where action is CREATE_REMOTE."""
        return [
            r
            for r in self.results
            if r.action == SyncAction.CREATE_REMOTE
        ]

    @property
    def updated_local(self) -> list[SyncResult]:
        """Results where action is PULL."""
        return [r for r in self.results if r.action == SyncAction.PULL]

    @property
    def updated_remote(self) -> list[SyncResult]:
        """Results where action is PUSH."""
        return [r for r in self.results if r.action == SyncAction.PUSH]

    @property
    def skipped(self) -> list[SyncResult]:
        """Results where action is SKIP."""
        return [r for r in self.results if r.action == SyncAction.SKIP]

    @property
    def remote_writes(self) -> int:
        """Number of create/update calls issued to the blog service."""
        return len(self.created_remote) + len(self.updated_remote)

