"""Team roster retrieval and team member lookup.

The roster is built with a two-level fan-out: the project's teams are listed
once, then each team's members are fetched on a bounded worker pool. A team
whose fetch fails or times out is logged and skipped, so a partial roster is
returned rather than nothing. Only a failure to list teams at all, or every
team failing, surfaces as :class:`RosterUnavailableError`.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .ado_client import AdoClient
from .config import Config
from .errors import RosterUnavailableError, ScannerError
from .identities import is_service_identity_ref
from .models import TeamMember

logger = logging.getLogger(__name__)


class TeamRoster:
    """Lookup of known team members by unique name."""

    def __init__(self, members: Iterable[TeamMember] = ()) -> None:
        self._members: List[TeamMember] = list(members)
        self._by_unique_name: Dict[str, TeamMember] = {}
        for member in self._members:
            for unique_name in member.unique_names:
                self._by_unique_name[unique_name.lower()] = member

    @property
    def members(self) -> List[TeamMember]:
        return list(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def find(self, unique_name: Optional[str]) -> Optional[TeamMember]:
        """Return the team member known under ``unique_name``, if any."""
        if not unique_name:
            return None
        return self._by_unique_name.get(unique_name.lower())


def build_team_members(member_payloads: Iterable[Dict[str, Any]]) -> List[TeamMember]:
    """Convert raw team membership payloads into merged ``TeamMember`` records.

    Service identities are dropped. Entries sharing an identity id (the same
    person in several teams) collapse into one member holding every unique
    name seen for them.
    """
    display_names: Dict[str, str] = {}
    unique_names: Dict[str, set] = {}

    for payload in member_payloads:
        identity = payload.get("identity") or {}
        unique_name = identity.get("uniqueName")
        if not unique_name or is_service_identity_ref(identity):
            continue

        key = str(identity.get("id") or unique_name)
        display_names.setdefault(key, str(identity.get("displayName") or unique_name))
        unique_names.setdefault(key, set()).add(str(unique_name))

    return [
        TeamMember(
            display_name=display_names[key],
            unique_names=frozenset(unique_names[key]),
            id=key,
        )
        for key in display_names
    ]


class TeamMembersProvider:
    """Fetches the team roster of the configured project."""

    def __init__(self, ado_client: AdoClient, config: Config) -> None:
        self._ado_client = ado_client
        self._config = config

    def get_team_members(self) -> List[TeamMember]:
        """Fetch members of every team in the project.

        A team whose members have not arrived ``member_timeout_seconds``
        after its fetch was submitted is skipped, so the whole fan-out is
        bounded by roughly one timeout however many teams there are.

        Raises:
            RosterUnavailableError: If teams cannot be listed or no team's
                members could be fetched.
        """
        try:
            teams = self._ado_client.list_teams()
        except ScannerError as exc:
            raise RosterUnavailableError(f"Unable to list teams: {exc}") from exc

        team_ids = [str(team["id"]) for team in teams if team.get("id")]
        if not team_ids:
            logger.info("Project has no teams; roster is empty")
            return []

        payloads: List[Dict[str, Any]] = []
        failed_teams = 0

        timeout = self._config.member_timeout_seconds
        executor = ThreadPoolExecutor(max_workers=self._config.max_workers)
        try:
            futures: Dict[str, Tuple[Future, float]] = {
                team_id: (
                    executor.submit(self._ado_client.list_team_members, team_id),
                    time.monotonic() + timeout,
                )
                for team_id in team_ids
            }
            for team_id, (future, deadline) in futures.items():
                try:
                    payloads.extend(future.result(timeout=max(0.0, deadline - time.monotonic())))
                except FutureTimeoutError:
                    future.cancel()
                    failed_teams += 1
                    logger.warning(
                        "Timed out fetching team members; skipping team",
                        extra={"team_id": team_id, "timeout_seconds": timeout},
                    )
                except ScannerError as exc:
                    failed_teams += 1
                    logger.warning(
                        "Failed to fetch team members; skipping team",
                        extra={"team_id": team_id, "error": str(exc)},
                    )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if failed_teams == len(team_ids):
            raise RosterUnavailableError(f"Member fetch failed for all {failed_teams} teams.")

        members = build_team_members(payloads)
        logger.info(
            "Fetched team roster",
            extra={"teams": len(team_ids), "failed_teams": failed_teams, "members": len(members)},
        )
        return members

    def get_roster(self) -> TeamRoster:
        return TeamRoster(self.get_team_members())
