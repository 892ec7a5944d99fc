"""Tests for status summaries and report rendering."""

import sys
from datetime import datetime, timezone
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ado_pr_status.models import PullRequest, PullRequestStatus, Repository, TeamMember
from ado_pr_status.report import format_duration, generate_report, summarize_statuses

NOW = datetime(2026, 1, 2, 12, 0, 0, tzinfo=timezone.utc)


def _pr(number: int, status: PullRequestStatus, created: datetime | None = None, title: str = "Change") -> PullRequest:
    return PullRequest(
        id=str(number),
        number=str(number),
        title=title,
        description="",
        created=created,
        url="",
        repository=Repository(id="r", name="repo"),
        is_draft=False,
        is_active=True,
        status=status,
        author=TeamMember(display_name="Ada", unique_names=frozenset({"ada@example.com"})),
    )


def test_summarize_statuses_counts_every_status_in_precedence_order():
    """Verify the summary covers all statuses and counts occurrences."""
    counts = summarize_statuses([
        _pr(1, PullRequestStatus.READY_TO_MERGE),
        _pr(2, PullRequestStatus.READY_TO_MERGE),
        _pr(3, PullRequestStatus.DRAFT),
    ])

    assert list(counts) == list(PullRequestStatus)
    assert counts[PullRequestStatus.READY_TO_MERGE] == 2
    assert counts[PullRequestStatus.DRAFT] == 1
    assert counts[PullRequestStatus.REJECTED] == 0


def test_format_duration_handles_none_zero_typical_and_large_values():
    """Verify duration formatter handles missing, small, and large values correctly."""
    assert format_duration(None) == "n/a"
    assert format_duration(0) == "00:00:00"
    assert format_duration(3661) == "01:01:01"
    assert format_duration(27 * 3600 + 5 * 60 + 9) == "27:05:09"


def test_generate_report_lists_counts_and_pull_requests_by_precedence():
    """Verify the report has a header, non-zero counts and PR lines ordered by status."""
    report = generate_report(
        repo_name="my-repo",
        pull_requests=[
            _pr(12, PullRequestStatus.READY_TO_MERGE, created=datetime(2026, 1, 2, 10, 30, tzinfo=timezone.utc), title="Ship it"),
            _pr(5, PullRequestStatus.FAILING_CHECKS, created=None, title="Broken build"),
        ],
        now=NOW,
    )

    lines = report.splitlines()
    assert lines[0] == "Repository: my-repo"
    assert "PR Status Report" in report
    assert "Pull requests: 2" in report
    assert "   Failing checks: 1" in report
    assert "   Ready to merge: 1" in report
    assert "Draft" not in report
    assert lines[-2] == "#5 [Failing checks] age=n/a author=Ada | Broken build"
    assert lines[-1] == "#12 [Ready to merge] age=01:30:00 author=Ada | Ship it"


def test_generate_report_without_pull_requests():
    """Verify an empty scan still renders a header and zero total."""
    report = generate_report(repo_name="empty", pull_requests=[], now=NOW)

    assert report.splitlines() == ["Repository: empty", "PR Status Report", "", "Pull requests: 0"]
