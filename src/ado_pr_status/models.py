"""Domain models for pull request status classification.

Two families live here:

- The *snapshot* types, an immutable bundle of the facts the status
  classifier looks at for a single pull request.
- The platform-neutral *output* records produced by the mapper. Owned
  records refer back to their owner by identifier rather than by object
  reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .errors import DataValidationError

MIN_VOTE = -10
MAX_VOTE = 10


class MergeState(Enum):
    UNKNOWN = "unknown"
    SUCCEEDED = "succeeded"
    CONFLICTS = "conflicts"
    FAILURE = "failure"


class LifecycleState(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class CheckState(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    UNKNOWN = "unknown"


class ThreadState(Enum):
    ACTIVE = "active"
    PENDING = "pending"
    CLOSED = "closed"


class Vote(Enum):
    NO_VOTE = "no_vote"
    APPROVED = "approved"
    REJECTED = "rejected"


class PullRequestStatus(Enum):
    """Lifecycle status of a pull request, listed in classification precedence."""

    COMPLETED = "completed"
    ABANDONED = "abandoned"
    MERGE_CONFLICTS = "merge_conflicts"
    DRAFT = "draft"
    REJECTED = "rejected"
    FAILING_CHECKS = "failing_checks"
    OUTSTANDING_COMMENTS = "outstanding_comments"
    FAILED_TO_MERGE = "failed_to_merge"
    NEEDS_REVIEWING = "needs_reviewing"
    READY_TO_MERGE = "ready_to_merge"


@dataclass(frozen=True)
class ReviewVote:
    """One reviewer's vote on a pull request."""

    voter_id: str
    vote_value: int
    is_required: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.vote_value, bool) or not isinstance(self.vote_value, int):
            raise DataValidationError(f"Vote value must be an integer: voter_id={self.voter_id}")
        if not MIN_VOTE <= self.vote_value <= MAX_VOTE:
            raise DataValidationError(
                f"Vote value {self.vote_value} is outside [{MIN_VOTE}, {MAX_VOTE}]: "
                f"voter_id={self.voter_id}"
            )


@dataclass(frozen=True)
class CheckResult:
    """A single build/check status posted against a pull request iteration."""

    context: str
    state: CheckState
    iteration_id: int
    status_id: int


@dataclass(frozen=True)
class ThreadSnapshot:
    """The part of a comment thread that matters for classification."""

    state: ThreadState


@dataclass(frozen=True)
class PullRequestSnapshot:
    """Immutable set of pull request facts supplied to the classifier."""

    merge_state: MergeState
    lifecycle_state: LifecycleState
    is_draft: bool = False
    review_votes: Tuple[ReviewVote, ...] = ()
    checks: Tuple[CheckResult, ...] = ()
    comment_threads: Tuple[ThreadSnapshot, ...] = ()
    merge_failure_message: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.lifecycle_state, LifecycleState):
            raise DataValidationError(
                f"Snapshot requires a lifecycle state, got {self.lifecycle_state!r}"
            )
        if not isinstance(self.merge_state, MergeState):
            raise DataValidationError(f"Snapshot requires a merge state, got {self.merge_state!r}")
        if not isinstance(self.is_draft, bool):
            raise DataValidationError(f"Snapshot draft flag must be a bool, got {self.is_draft!r}")

        # Accept any iterable for the collections but store tuples.
        object.__setattr__(self, "review_votes", tuple(self.review_votes))
        object.__setattr__(self, "checks", tuple(self.checks))
        object.__setattr__(self, "comment_threads", tuple(self.comment_threads))

        for vote in self.review_votes:
            if not isinstance(vote, ReviewVote):
                raise DataValidationError(f"Unexpected review vote entry: {vote!r}")
        for check in self.checks:
            if not isinstance(check, CheckResult) or not isinstance(check.state, CheckState):
                raise DataValidationError(f"Unexpected check entry: {check!r}")
        for thread in self.comment_threads:
            if not isinstance(thread, ThreadSnapshot) or not isinstance(thread.state, ThreadState):
                raise DataValidationError(f"Unexpected comment thread entry: {thread!r}")

    @property
    def latest_iteration_checks(self) -> Tuple[CheckResult, ...]:
        """Checks posted against the highest iteration id, in input order."""
        if not self.checks:
            return ()
        latest_iteration = max(check.iteration_id for check in self.checks)
        return tuple(check for check in self.checks if check.iteration_id == latest_iteration)

    @property
    def latest_checks(self) -> Dict[str, CheckState]:
        """Most recent result per check context within the latest iteration."""
        newest: Dict[str, CheckResult] = {}
        for check in self.latest_iteration_checks:
            current = newest.get(check.context)
            if current is None or check.status_id > current.status_id:
                newest[check.context] = check
        return {context: check.state for context, check in newest.items()}


@dataclass(frozen=True)
class TeamMember:
    """A person known to the scanner, possibly under several unique names."""

    display_name: str
    unique_names: FrozenSet[str] = field(default_factory=frozenset)
    id: Optional[str] = None


@dataclass(slots=True)
class Repository:
    """Represents a source repository in the platform-neutral model."""

    id: str
    name: str
    url: str = ""


@dataclass(slots=True)
class Comment:
    """A human comment inside a thread."""

    thread_id: int
    author: TeamMember
    last_updated: Optional[datetime]


@dataclass(slots=True)
class CommentThread:
    """A discussion thread owned by a pull request."""

    id: int
    pull_request_id: str
    state: ThreadState
    comments: List[Comment] = field(default_factory=list)


@dataclass(slots=True)
class Approver:
    """A reviewer who has cast a vote on a pull request."""

    pull_request_id: str
    team_member: TeamMember
    vote: Vote
    is_required: bool
    time: Optional[datetime] = None


@dataclass(slots=True)
class PullRequest:
    """Platform-neutral pull request record."""

    id: str
    number: str
    title: str
    description: str
    created: Optional[datetime]
    url: str
    repository: Repository
    is_draft: bool
    is_active: bool
    status: PullRequestStatus
    author: TeamMember
    approvers: List[Approver] = field(default_factory=list)
    comment_threads: List[CommentThread] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    platform: str = "AzureDevOps"

    def thread(self, thread_id: int) -> Optional[CommentThread]:
        """Look up one of this pull request's threads by id.

        Threads and comments refer to their owner by id (``pull_request_id``,
        ``thread_id``) rather than by object, so a thread id is resolved
        through the owning collection here.
        """
        for comment_thread in self.comment_threads:
            if comment_thread.id == thread_id:
                return comment_thread
        return None


@dataclass(slots=True)
class PullRequestContext:
    """Raw Azure DevOps payloads gathered for one pull request."""

    pull_request: Dict[str, Any]
    threads: List[Dict[str, Any]] = field(default_factory=list)
    statuses: List[Dict[str, Any]] = field(default_factory=list)
