"""The interface shared by the image store backends."""

from typing import Protocol, runtime_checkable

from ..sync.models import LocalImage


@runtime_checkable
class ImageStore(Protocol):
    """A remote place where post images live.

    ``build_index()`` is called once per run before anything else.  The
    other two operations are idempotent: calling them again for an image
    that is already in place costs no transfer.

    Implementations record what they transferred in ``uploaded`` (public
    URLs) and ``downloaded`` (post-relative local paths).
    """

    uploaded: list[str]
    downloaded: list[str]

    def build_index(self) -> None:
        """Load the listing of remote images into memory."""
        ...

    def ensure_uploaded(self, image: LocalImage) -> str:
        """Make sure ``image`` exists remotely and return its public URL."""
        ...

    def ensure_downloaded(self, url: str, date_part: str, slug: str) -> str:
        """
        Make sure the image at ``url`` exists locally.

        Returns:
            The post-relative local path, or "" when ``url`` does not
            belong to this store and the link should be left alone.
        """
        ...
