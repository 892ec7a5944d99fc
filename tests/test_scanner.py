"""Tests for pull request scanning orchestration."""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ado_pr_status.ado_client import AdoClient
from ado_pr_status.config import Config
from ado_pr_status.errors import ApiError, AuthenticationError, DataValidationError, RosterUnavailableError
from ado_pr_status.models import PullRequestContext, TeamMember
from ado_pr_status.scanner import load_roster, scan_pull_requests
from ado_pr_status.team_members import TeamRoster


def test_scan_pull_requests_maps_each_pr():
    """Verify every listed PR is expanded to a context and mapped."""
    client = Mock()
    client.get_pull_request_context.side_effect = lambda repo_id, pr: PullRequestContext(pull_request=pr)
    mapper = Mock()
    mapper.to_pull_request.side_effect = lambda context: f"mapped-{context.pull_request['pullRequestId']}"

    result = scan_pull_requests(client, mapper, "repo-id", [{"pullRequestId": 1}, {"pullRequestId": 2}])

    assert result == ["mapped-1", "mapped-2"]


def test_scan_pull_requests_skips_unauthorized_and_malformed_prs():
    """Verify authorization and validation failures only drop the affected PR."""
    client = Mock()

    def _context(repo_id, pr):
        if pr["pullRequestId"] == 1:
            raise AuthenticationError("denied")
        return PullRequestContext(pull_request=pr)

    client.get_pull_request_context.side_effect = _context
    mapper = Mock()

    def _map(context):
        if context.pull_request["pullRequestId"] == 2:
            raise DataValidationError("bad status")
        return "ok"

    mapper.to_pull_request.side_effect = _map

    result = scan_pull_requests(
        client, mapper, "repo-id", [{"pullRequestId": 1}, {"pullRequestId": 2}, {"pullRequestId": 3}]
    )

    assert result == ["ok"]


def test_scan_pull_requests_skips_listed_pr_without_id():
    """Verify a listed PR missing its id is skipped instead of aborting the scan."""
    client = AdoClient(config=Config(organization="org", project="proj", repo_name="repo", pat="pat"))
    client.list_threads = Mock(return_value=[])
    client.list_statuses = Mock(return_value=[])
    mapper = Mock()
    mapper.to_pull_request.side_effect = lambda context: str(context.pull_request["pullRequestId"])

    result = scan_pull_requests(client, mapper, "repo-id", [{"title": "no id"}, {"pullRequestId": 2}])

    assert result == ["2"]
    client.list_threads.assert_called_once_with("repo-id", 2)


def test_scan_pull_requests_propagates_api_errors():
    """Verify API failures that survived retries abort the scan."""
    client = Mock()
    client.get_pull_request_context.side_effect = ApiError("down")

    with pytest.raises(ApiError):
        scan_pull_requests(client, Mock(), "repo-id", [{"pullRequestId": 1}])


def test_load_roster_returns_provider_roster():
    """Verify the fetched roster is used when available."""
    roster = TeamRoster([TeamMember(display_name="Ada", unique_names=frozenset({"ada@example.com"}))])
    provider = Mock()
    provider.get_roster.return_value = roster

    assert load_roster(provider) is roster


def test_load_roster_degrades_to_empty_roster():
    """Verify an unavailable roster degrades to an empty lookup."""
    provider = Mock()
    provider.get_roster.side_effect = RosterUnavailableError("no teams")

    roster = load_roster(provider)

    assert len(roster) == 0
    assert roster.find("ada@example.com") is None
