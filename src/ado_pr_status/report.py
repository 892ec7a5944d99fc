"""Summary and formatting helpers for pull request status reporting.

This module provides utilities for:
- Counting pull requests per derived status.
- Formatting second-based durations as ``HH:MM:SS``.
- Building a human-readable report for a repository's pull requests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from .models import PullRequest, PullRequestStatus

_STATUS_LABELS = {
    PullRequestStatus.COMPLETED: "Completed",
    PullRequestStatus.ABANDONED: "Abandoned",
    PullRequestStatus.MERGE_CONFLICTS: "Merge conflicts",
    PullRequestStatus.DRAFT: "Draft",
    PullRequestStatus.REJECTED: "Rejected",
    PullRequestStatus.FAILING_CHECKS: "Failing checks",
    PullRequestStatus.OUTSTANDING_COMMENTS: "Outstanding comments",
    PullRequestStatus.FAILED_TO_MERGE: "Failed to merge",
    PullRequestStatus.NEEDS_REVIEWING: "Needs reviewing",
    PullRequestStatus.READY_TO_MERGE: "Ready to merge",
}


def status_label(status: PullRequestStatus) -> str:
    return _STATUS_LABELS[status]


def summarize_statuses(pull_requests: Sequence[PullRequest]) -> Dict[PullRequestStatus, int]:
    """Count pull requests per status.

    Every status is present in the result, in classification precedence
    order, with ``0`` for statuses no pull request has.
    """
    counts = {status: 0 for status in PullRequestStatus}
    for pull_request in pull_requests:
        counts[pull_request.status] += 1
    return counts


def format_duration(seconds: Optional[float]) -> str:
    """Format seconds as ``HH:MM:SS``.

    Args:
        seconds: Duration in seconds.

    Returns:
        ``"n/a"`` when ``seconds`` is ``None``; otherwise a rounded
        ``HH:MM:SS`` string.
    """
    if seconds is None:
        return "n/a"

    total_seconds = int(round(seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    remaining_seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{remaining_seconds:02d}"


def _age_seconds(pull_request: PullRequest, now: datetime) -> Optional[float]:
    if pull_request.created is None:
        return None
    age = (now - pull_request.created).total_seconds()
    return age if age >= 0 else None


def generate_report(
    repo_name: str,
    pull_requests: Sequence[PullRequest],
    now: Optional[datetime] = None,
) -> str:
    """Generate a human-readable status report for a repository.

    The report has a per-status count section followed by one line per pull
    request (number, status, age, author and title), ordered by status
    precedence and then by pull request number.

    Args:
        repo_name: Repository display name.
        pull_requests: Mapped pull requests.
        now: Reference time for ages; defaults to the current UTC time.

    Returns:
        Formatted multi-line text report.
    """
    now = now or datetime.now(timezone.utc)
    counts = summarize_statuses(pull_requests)
    precedence = {status: index for index, status in enumerate(PullRequestStatus)}

    lines: List[str] = [
        f"Repository: {repo_name}",
        "PR Status Report",
        "",
        f"Pull requests: {len(pull_requests)}",
    ]
    lines.extend(
        f"   {status_label(status)}: {count}" for status, count in counts.items() if count
    )

    if pull_requests:
        lines.append("")

    ordered = sorted(
        pull_requests,
        key=lambda pr: (precedence[pr.status], int(pr.number) if pr.number.isdigit() else 0),
    )
    for pull_request in ordered:
        lines.append(
            f"#{pull_request.number} [{status_label(pull_request.status)}]"
            f" age={format_duration(_age_seconds(pull_request, now))}"
            f" author={pull_request.author.display_name}"
            f" | {pull_request.title}"
        )

    return "\n".join(lines)
