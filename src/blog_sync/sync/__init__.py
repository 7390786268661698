"""Bidirectional post sync between a local directory and a blog.

Modules:

- ``engine``    -- ``SyncEngine``: orchestrates a full sync run.
- ``local``     -- discovery of ``YYYY-MM-DD-<slug>.md`` files.
- ``models``    -- ``LocalPost``, ``RemotePost``, ``LocalImage``,
  ``RemoteImage``, ``SyncAction``, ``SyncResult``, ``SyncReport``.
- ``reporter``  -- Human-readable and JSON report formatting.

Import the engine from ``blog_sync.sync.engine``; it is not re-exported
here because the clients and the scanner import the models from this package.

Usage example
-------------
::

    from pathlib import Path
    from blog_sync.core.snapas import SnapAsClient
    from blog_sync.core.writeas import WriteAsClient
    from blog_sync.images import SnapAsImageStore
    from blog_sync.sync import format_sync_report
    from blog_sync.sync.engine import SyncEngine

    client = WriteAsClient()
    token = client.login("alice", "secret")
    store = SnapAsImageStore(SnapAsClient(token), Path("blog"))
    engine = SyncEngine(client, store, Path("blog"), "alice")
    print(format_sync_report(engine.run()))
"""

from .models import (
    LocalImage,
    LocalPost,
    RemoteImage,
    RemotePost,
    SyncAction,
    SyncReport,
    SyncResult,
)
from .reporter import format_sync_report, report_to_json

__all__ = [
    "LocalImage",
    "LocalPost",
    "RemoteImage",
    "RemotePost",
    "SyncAction",
    "SyncReport",
    "SyncResult",
    "format_sync_report",
    "report_to_json",
]
