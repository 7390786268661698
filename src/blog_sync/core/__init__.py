"""Remote service clients and the retry policy shared by the sync engine."""

from .retry import RetryPolicy
from .snapas import SnapAsClient
from .webdav import WebDAVClient, WebDAVEntry
from .writeas import PostParams, WriteAsClient

__all__ = [
    "PostParams",
    "RetryPolicy",
    "SnapAsClient",
    "WebDAVClient",
    "WebDAVEntry",
    "WriteAsClient",
]
