"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync runs:

- ``format_sync_report`` -- full post-sync summary.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SyncReport

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one entry.
    Skipped posts are summarised by count only to avoid excessive output.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    directions = []
    if report.download:
        directions.append("download")
    if report.upload:
        directions.append("upload")

    lines.append(
        f"Sync report for '{report.collection}' "
        f"({', '.join(directions) or 'no-op'})"
    )
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    created = len(report.created_remote) + len(report.created_local)
    lines.append(
        f"Found {report.local_posts} local and {report.remote_posts} remote posts: "
        f"{len(report.updated_remote)} pushed, "
        f"{len(report.updated_local)} pulled, "
        f"{created} created"
    )
    lines.append("")

    if report.updated_remote:
        lines.append("Pushed to blog:")
        for r in report.updated_remote:
            lines.append(f"  {r.local_path} -> {r.slug}")
        lines.append("")

    if report.updated_local:
        lines.append("Pulled from blog:")
        for r in report.updated_local:
            lines.append(f"  {r.slug} -> {r.local_path}")
        lines.append("")

    if report.created_remote:
        lines.append("Created (remote):")
        for r in report.created_remote:
            lines.append(f"  {r.local_path} -> {r.slug}")
        lines.append("")

    if report.created_local:
        lines.append("Created (local):")
        for r in report.created_local:
            lines.append(f"  {r.slug} -> {r.local_path}")
        lines.append("")

    if report.uploaded_images:
        lines.append("Uploaded images:")
        for url in report.uploaded_images:
            lines.append(f"  {url}")
        lines.append("")

    if report.downloaded_images:
        lines.append("Downloaded images:")
        for path in report.downloaded_images:
            lines.append(f"  {path}")
        lines.append("")

    if report.skipped:
        lines.append(f"Up to date: {len(report.skipped)} posts")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a JSON-serialisable dict.

    Args:
        report: The completed sync report.

    Returns:
        Dict with ``summary`` counts plus the full ``results`` list.
    """
    return {
        "collection": report.collection,
        "download": report.download,
        "upload": report.upload,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "summary": {
            "local_posts": report.local_posts,
            "remote_posts": report.remote_posts,
            "created_local": len(report.created_local),
            "created_remote": len(report.created_remote),
            "updated_local": len(report.updated_local),
            "updated_remote": len(report.updated_remote),
            "skipped": len(report.skipped),
            "remote_writes": report.remote_writes,
            "images_uploaded": len(report.uploaded_images),
            "images_downloaded": len(report.downloaded_images),
        },
        "results": [
            {
                "slug": r.slug,
                "local_path": r.local_path,
                "action": r.action.value,
            }
            for r in report.results
        ],
        "uploaded_images": list(report.uploaded_images),
        "downloaded_images": list(report.downloaded_images),
    }
