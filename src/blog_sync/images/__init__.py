"""Image stores: where the images referenced by posts are published."""

from .base import ImageStore
from .factory import create_image_store
from .snapas_store import (
    ESCAPE_MARKER,
    SEPARATOR_ESCAPE,
    SnapAsImageStore,
    decode_image_identity,
    encode_image_identity,
)
from .webdav_store import WebDAVImageStore

__all__ = [
    "ESCAPE_MARKER",
    "ImageStore",
    "SEPARATOR_ESCAPE",
    "SnapAsImageStore",
    "WebDAVImageStore",
    "create_image_store",
    "decode_image_identity",
    "encode_image_identity",
]
