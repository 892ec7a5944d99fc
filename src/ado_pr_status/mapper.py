"""Mapping of raw Azure DevOps pull request payloads to platform-neutral models."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from .classifier import classify, classify_vote
from .errors import DataValidationError
from .identities import is_service_identity_ref
from .models import (
    Approver,
    CheckResult,
    CheckState,
    Comment,
    CommentThread,
    LifecycleState,
    MergeState,
    PullRequest,
    PullRequestContext,
    PullRequestSnapshot,
    Repository,
    ReviewVote,
    TeamMember,
    ThreadSnapshot,
    ThreadState,
)

logger = logging.getLogger(__name__)

TeamMemberResolver = Callable[[str], Optional[TeamMember]]

VOTE_UPDATE_THREAD_TYPE = "VoteUpdate"

_MERGE_STATES = {
    "succeeded": MergeState.SUCCEEDED,
    "conflicts": MergeState.CONFLICTS,
    "failure": MergeState.FAILURE,
}

_CHECK_STATES = {
    "succeeded": CheckState.SUCCESS,
    "failed": CheckState.FAILURE,
    "pending": CheckState.PENDING,
}

_THREAD_STATES = {
    "active": ThreadState.ACTIVE,
    "pending": ThreadState.PENDING,
}

# Azure DevOps emits seven fractional digits; datetime accepts at most six.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse Azure DevOps ISO8601 timestamps into timezone-aware datetimes."""
    if not value:
        return None

    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    normalized = _FRACTION_RE.sub(r"\1", normalized)
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise DataValidationError(f"Unparseable Azure DevOps timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_lifecycle_state(value: Optional[str]) -> LifecycleState:
    try:
        return LifecycleState((value or "").lower())
    except ValueError as exc:
        raise DataValidationError(f"Unknown pull request status: {value!r}") from exc


def parse_merge_state(value: Optional[str]) -> MergeState:
    return _MERGE_STATES.get((value or "").lower(), MergeState.UNKNOWN)


def parse_check_state(value: Optional[str]) -> CheckState:
    return _CHECK_STATES.get((value or "").lower(), CheckState.UNKNOWN)


def parse_thread_state(value: Optional[str]) -> ThreadState:
    return _THREAD_STATES.get((value or "").lower(), ThreadState.CLOSED)


def get_pull_request_ui_url(pull_request_url: str) -> str:
    """Convert a pull request API URL into the browsable web URL."""
    return (
        pull_request_url
        .replace("pullRequests", "pullrequest")
        .replace("/git/", "/_git/")
        .replace("/repositories/", "/")
        .replace("/_apis/", "/")
    )


def get_repository_ui_url(repository_url: str) -> str:
    """Convert a repository API URL into the browsable web URL."""
    return (
        repository_url
        .replace("/git/", "/_git/")
        .replace("/repositories/", "/")
        .replace("/_apis/", "/")
    )


def _thread_type(thread: Dict[str, Any]) -> Optional[str]:
    """Read the ``CodeReviewThreadType`` property, whatever its key casing."""
    for key, value in (thread.get("properties") or {}).items():
        if key.lower() != "codereviewthreadtype":
            continue
        if isinstance(value, dict):
            return value.get("$value")
        return value
    return None


def _human_comments(thread: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        comment
        for comment in thread.get("comments") or []
        if not is_service_identity_ref(comment.get("author"))
    ]


def _has_human_participant(thread: Dict[str, Any]) -> bool:
    """Threads without comments count as human; only all-service threads are excluded."""
    comments = thread.get("comments") or []
    return not comments or bool(_human_comments(thread))


class PullRequestMapper:
    """Builds snapshots and platform-neutral pull requests from raw payloads."""

    def __init__(self, resolve_team_member: TeamMemberResolver) -> None:
        """
        Args:
            resolve_team_member: Lookup returning the known team member for a
                unique name, or ``None``.
        """
        self._resolve_team_member = resolve_team_member

    def get_person(self, unique_name: str, display_name: Optional[str]) -> TeamMember:
        """Resolve a person, synthesizing an ad-hoc member when unknown."""
        found = self._resolve_team_member(unique_name)
        if found is not None:
            return found
        return TeamMember(display_name=display_name or unique_name, unique_names=frozenset({unique_name}))

    def _human_reviewers(self, pull_request: Dict[str, Any]) -> List[Dict[str, Any]]:
        author_name = (pull_request.get("createdBy") or {}).get("uniqueName")
        return [
            reviewer
            for reviewer in pull_request.get("reviewers") or []
            if reviewer.get("uniqueName") != author_name and not is_service_identity_ref(reviewer)
        ]

    def build_snapshot(self, context: PullRequestContext) -> PullRequestSnapshot:
        """Assemble the classifier input for one pull request.

        Raises:
            DataValidationError: If the payload lacks a recognizable status or
                carries malformed votes.
        """
        pull_request = context.pull_request

        review_votes = [
            ReviewVote(
                voter_id=str(reviewer.get("uniqueName") or reviewer.get("id") or ""),
                vote_value=int(reviewer.get("vote") or 0),
                is_required=bool(reviewer.get("isRequired")),
            )
            for reviewer in self._human_reviewers(pull_request)
        ]

        checks: List[CheckResult] = []
        for status in context.statuses:
            context_info = status.get("context") or {}
            context_name = context_info.get("name") or ""
            genre = context_info.get("genre")
            checks.append(
                CheckResult(
                    context=f"{genre}/{context_name}" if genre else context_name,
                    state=parse_check_state(status.get("state")),
                    iteration_id=int(status.get("iterationId") or 0),
                    status_id=int(status.get("id") or 0),
                )
            )

        threads = [
            ThreadSnapshot(state=parse_thread_state(thread.get("status")))
            for thread in context.threads
            if _has_human_participant(thread)
        ]

        return PullRequestSnapshot(
            merge_state=parse_merge_state(pull_request.get("mergeStatus")),
            lifecycle_state=parse_lifecycle_state(pull_request.get("status")),
            is_draft=bool(pull_request.get("isDraft") or False),
            review_votes=tuple(review_votes),
            checks=tuple(checks),
            comment_threads=tuple(threads),
            merge_failure_message=pull_request.get("mergeFailureMessage"),
        )

    def to_pull_request(self, context: PullRequestContext) -> PullRequest:
        """Map a raw pull request context to the platform-neutral model.

        Raises:
            DataValidationError: If required pull request fields are missing.
        """
        pull_request = context.pull_request
        pr_id = pull_request.get("pullRequestId")
        created_by = pull_request.get("createdBy") or {}
        repository = pull_request.get("repository") or {}

        if pr_id is None or not created_by.get("uniqueName") or not repository.get("id"):
            raise DataValidationError(
                f"Azure DevOps pull request payload is missing required fields: pullRequestId={pr_id}"
            )

        pr_key = str(pr_id)
        snapshot = self.build_snapshot(context)

        approvers = [
            self._get_approver(pr_key, reviewer, context.threads)
            for reviewer in self._human_reviewers(pull_request)
            if reviewer.get("vote")
        ]

        return PullRequest(
            id=pr_key,
            number=pr_key,
            title=str(pull_request.get("title") or ""),
            description=str(pull_request.get("description") or ""),
            created=parse_datetime(pull_request.get("creationDate")),
            url=get_pull_request_ui_url(str(pull_request.get("url") or "")),
            repository=Repository(
                id=str(repository["id"]),
                name=str(repository.get("name") or ""),
                url=get_repository_ui_url(str(repository.get("url") or "")),
            ),
            is_draft=snapshot.is_draft,
            is_active=snapshot.lifecycle_state is LifecycleState.ACTIVE,
            status=classify(snapshot),
            author=self.get_person(created_by["uniqueName"], created_by.get("displayName")),
            approvers=approvers,
            comment_threads=[self._get_comment_thread(pr_key, thread) for thread in context.threads],
            labels=[
                str(label.get("name"))
                for label in pull_request.get("labels") or []
                if label.get("active") is not False and label.get("name")
            ],
        )

    def _get_comment_thread(self, pr_key: str, thread: Dict[str, Any]) -> CommentThread:
        thread_id = int(thread.get("id") or 0)
        return CommentThread(
            id=thread_id,
            pull_request_id=pr_key,
            state=parse_thread_state(thread.get("status")),
            comments=[
                Comment(
                    thread_id=thread_id,
                    author=self.get_person(
                        (comment.get("author") or {}).get("uniqueName") or "",
                        (comment.get("author") or {}).get("displayName"),
                    ),
                    last_updated=parse_datetime(comment.get("lastUpdatedDate")),
                )
                for comment in _human_comments(thread)
            ],
        )

    def _get_approver(
        self,
        pr_key: str,
        reviewer: Dict[str, Any],
        threads: Iterable[Dict[str, Any]],
    ) -> Approver:
        unique_name = str(reviewer.get("uniqueName") or "")
        return Approver(
            pull_request_id=pr_key,
            team_member=self.get_person(unique_name, reviewer.get("displayName")),
            vote=classify_vote(reviewer.get("vote")),
            is_required=bool(reviewer.get("isRequired")),
            time=self._last_vote_time(unique_name, threads),
        )

    def _last_vote_time(self, unique_name: str, threads: Iterable[Dict[str, Any]]) -> Optional[datetime]:
        """Timestamp of the reviewer's most recent vote-update thread, if any."""
        last_time: Optional[datetime] = None
        for thread in threads:
            if _thread_type(thread) != VOTE_UPDATE_THREAD_TYPE:
                continue
            if any(
                (comment.get("author") or {}).get("uniqueName") == unique_name
                for comment in thread.get("comments") or []
            ):
                last_time = parse_datetime(thread.get("lastUpdatedDate"))
        return last_time
