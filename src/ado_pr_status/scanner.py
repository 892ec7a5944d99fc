"""Pull request scanning: fetch, map and classify a repository's pull requests."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .ado_client import AdoClient
from .errors import AuthenticationError, DataValidationError, RosterUnavailableError
from .mapper import PullRequestMapper
from .models import PullRequest
from .team_members import TeamMembersProvider, TeamRoster

logger = logging.getLogger(__name__)


def load_roster(provider: TeamMembersProvider) -> TeamRoster:
    """Fetch the team roster, degrading to an empty roster when unavailable.

    With an empty roster every person is attributed through an ad-hoc team
    member built from their own unique name.
    """
    try:
        return provider.get_roster()
    except RosterUnavailableError as exc:
        logger.warning("Team roster unavailable; attributing people ad hoc", extra={"error": str(exc)})
        return TeamRoster()


def scan_pull_requests(
    ado_client: AdoClient,
    mapper: PullRequestMapper,
    repo_id: str,
    prs: List[Dict[str, Any]],
) -> List[PullRequest]:
    """Fetch context for each listed pull request and map it.

    A pull request whose context is refused (authorization) or malformed is
    logged and skipped; other API errors propagate.
    """
    pull_requests: List[PullRequest] = []
    skipped = 0

    for pr in prs:
        pr_id = pr.get("pullRequestId")
        try:
            context = ado_client.get_pull_request_context(repo_id, pr)
            pull_requests.append(mapper.to_pull_request(context))
        except AuthenticationError as exc:
            skipped += 1
            logger.warning(
                "Skipping pull request: access denied",
                extra={"repo_id": repo_id, "pr_id": pr_id, "error": str(exc)},
            )
        except DataValidationError as exc:
            skipped += 1
            logger.warning(
                "Skipping pull request: malformed payload",
                extra={"repo_id": repo_id, "pr_id": pr_id, "error": str(exc)},
            )

    logger.info(
        "Scanned pull requests",
        extra={"repo_id": repo_id, "prs_total": len(prs), "prs_mapped": len(pull_requests), "prs_skipped": skipped},
    )

    return pull_requests
