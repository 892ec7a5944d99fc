"""Pull request status classification.

``classify`` reduces a :class:`PullRequestSnapshot` to exactly one
:class:`PullRequestStatus`. Rules are evaluated in order and the first match
wins:

1. completed PRs are ``COMPLETED``
2. abandoned PRs are ``ABANDONED``
3. merge conflicts give ``MERGE_CONFLICTS``
4. drafts give ``DRAFT``
5. a reviewer voting exactly -10 gives ``REJECTED``
6. a failing check in the latest iteration gives ``FAILING_CHECKS``
7. an active or pending thread gives ``OUTSTANDING_COMMENTS``
8. a merge failure message gives ``FAILED_TO_MERGE``
9. a required reviewer without a positive vote gives ``NEEDS_REVIEWING``
10. any positive vote gives ``READY_TO_MERGE``
11. otherwise ``NEEDS_REVIEWING``
"""

from __future__ import annotations

from typing import Optional

from .models import (
    CheckState,
    LifecycleState,
    MergeState,
    PullRequestSnapshot,
    PullRequestStatus,
    ThreadState,
    Vote,
)

# Vote value Azure DevOps records for "Rejected". Softer negative votes
# ("waiting for author" is -5) do not block on their own.
HARD_REJECTION_VOTE = -10

_OPEN_THREAD_STATES = (ThreadState.ACTIVE, ThreadState.PENDING)


def classify_vote(vote_value: Optional[int]) -> Vote:
    """Classify a reviewer's raw vote value."""
    if not vote_value:
        return Vote.NO_VOTE
    if vote_value > 0:
        return Vote.APPROVED
    return Vote.REJECTED


def has_failing_checks(snapshot: PullRequestSnapshot) -> bool:
    """Return ``True`` when a context's newest check in the latest iteration failed.

    Contexts that only report in earlier iterations are ignored.
    """
    return any(state is CheckState.FAILURE for state in snapshot.latest_checks.values())


def classify(snapshot: PullRequestSnapshot) -> PullRequestStatus:
    """Derive the lifecycle status of a pull request snapshot."""
    if snapshot.lifecycle_state is LifecycleState.COMPLETED:
        return PullRequestStatus.COMPLETED

    if snapshot.lifecycle_state is LifecycleState.ABANDONED:
        return PullRequestStatus.ABANDONED

    if snapshot.merge_state is MergeState.CONFLICTS:
        return PullRequestStatus.MERGE_CONFLICTS

    if snapshot.is_draft:
        return PullRequestStatus.DRAFT

    votes = snapshot.review_votes

    if any(vote.vote_value == HARD_REJECTION_VOTE for vote in votes):
        return PullRequestStatus.REJECTED

    if has_failing_checks(snapshot):
        return PullRequestStatus.FAILING_CHECKS

    if any(thread.state in _OPEN_THREAD_STATES for thread in snapshot.comment_threads):
        return PullRequestStatus.OUTSTANDING_COMMENTS

    if snapshot.merge_failure_message:
        return PullRequestStatus.FAILED_TO_MERGE

    if any(vote.is_required and vote.vote_value <= 0 for vote in votes):
        return PullRequestStatus.NEEDS_REVIEWING

    if any(vote.vote_value > 0 for vote in votes):
        return PullRequestStatus.READY_TO_MERGE

    return PullRequestStatus.NEEDS_REVIEWING
