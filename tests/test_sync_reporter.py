"""Tests for sync reporter formatting functions."""

from __future__ import annotations

import json

from blog_sync.sync.models import SyncAction, SyncReport, SyncResult
from blog_sync.sync.reporter import format_sync_report, report_to_json

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_report(
    results: list[SyncResult] | None = None,
    download: bool = True,
    upload: bool = True,
    **kwargs,
) -> SyncReport:
    """Build a SyncReport with sensible defaults."""
    return SyncReport(
        collection="myblog",
        download=download,
        upload=upload,
        results=results or [],
        started_at="2026-02-07T10:00:00Z",
        completed_at="2026-02-07T10:01:00Z",
        **kwargs,
    )


def _result(action: SyncAction, slug: str = "hello") -> SyncResult:
    return SyncResult(
        slug=slug, local_path=f"2024-03-01-{slug}.md", action=action
    )


# ---------------------------------------------------------------------------
# format_sync_report
# ---------------------------------------------------------------------------


class TestFormatSyncReport:
    """Tests for format_sync_report()."""

    def test_header(self):
        text = format_sync_report(_make_report())
        assert "Sync report for 'myblog' (download, upload)" in text
        assert "Completed: 2026-02-07T10:01:00Z" in text

    def test_upload_only_header(self):
        text = format_sync_report(_make_report(download=False))
        assert "(upload)" in text

    def test_counts_line(self):
        report = _make_report(
            [
                _result(SyncAction.PUSH, "a"),
                _result(SyncAction.PULL, "b"),
                _result(SyncAction.CREATE_REMOTE, "c"),
                _result(SyncAction.CREATE_LOCAL, "d"),
            ],
            local_posts=3,
            remote_posts=3,
        )
        text = format_sync_report(report)
        assert "Found 3 local and 3 remote posts: 1 pushed, 1 pulled, 2 created" in text

    def test_sections(self):
        report = _make_report(
            [_result(SyncAction.PUSH, "a"), _result(SyncAction.CREATE_LOCAL, "d")],
            uploaded_images=["https://i.snap.as/x.png"],
        )
        text = format_sync_report(report)
        assert "Pushed to blog:\n  2024-03-01-a.md -> a" in text
        assert "Created (local):\n  d -> 2024-03-01-d.md" in text
        assert "Uploaded images:\n  https://i.snap.as/x.png" in text
        assert "Pulled from blog" not in text

    def test_skipped_summarised(self):
        report = _make_report([_result(SyncAction.SKIP, s) for s in "abc"])
        text = format_sync_report(report)
        assert "Up to date: 3 posts" in text
        assert "2024-03-01-a.md" not in text

    def test_no_trailing_whitespace(self):
        text = format_sync_report(_make_report([_result(SyncAction.PULL)]))
        assert text == text.rstrip()


# ---------------------------------------------------------------------------
# report_to_json
# ---------------------------------------------------------------------------


class TestReportToJson:
    def test_serialisable(self):
        report = _make_report(
            [_result(SyncAction.PUSH), _result(SyncAction.SKIP, "b")],
            downloaded_images=["2024-03-01-hello/a.png"],
        )
        data = report_to_json(report)

        json.dumps(data)
        assert data["summary"]["updated_remote"] == 1
        assert data["summary"]["skipped"] == 1
        assert data["summary"]["remote_writes"] == 1
        assert data["summary"]["images_downloaded"] == 1
        assert data["results"][0] == {
            "slug": "hello",
            "local_path": "2024-03-01-hello.md",
            "action": "push",
        }


class TestReportProperties:
    def test_remote_writes(self):
        report = _make_report(
            [
                _result(SyncAction.PUSH, "a"),
                _result(SyncAction.CREATE_REMOTE, "b"),
                _result(SyncAction.PULL, "c"),
            ]
        )
        assert report.remote_writes == 2

