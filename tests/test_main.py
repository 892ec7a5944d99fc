"""Tests for application orchestration in the main module."""

import sys
from argparse import Namespace
from pathlib import Path
from unittest.mock import ANY, Mock, patch

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ado_pr_status.config import Config
from ado_pr_status.errors import ApiError, AuthenticationError, ConfigurationError
from ado_pr_status.main import orchestrate_status_scan
from ado_pr_status.team_members import TeamRoster


def _args(**overrides) -> Namespace:
    values = dict(
        org="org",
        project="project",
        repo_name="repo",
        status="active",
        max_workers=50,
        member_timeout=5.0,
        include_team_members=True,
        verbose=False,
    )
    values.update(overrides)
    return Namespace(**values)


def _config(**overrides) -> Config:
    values = dict(organization="org", project="project", repo_name="repo", pat="secret")
    values.update(overrides)
    return Config(**values)


def test_orchestrate_status_scan_success(capsys):
    """Verify orchestration returns 0 and wires components correctly on success."""
    config = _config()
    ado_client = Mock()
    ado_client.resolve_repo_name_to_id.return_value = "repo-id"
    ado_client.list_pull_requests.return_value = [{"pullRequestId": 1}]
    roster = TeamRoster()

    with patch("ado_pr_status.main.parse_args", return_value=_args()) as parse_args_mock, patch(
        "ado_pr_status.main.configure_logging"
    ), patch(
        "ado_pr_status.main.load_config", return_value=config
    ) as load_config_mock, patch(
        "ado_pr_status.main.AdoClient", return_value=ado_client
    ) as ado_client_ctor_mock, patch(
        "ado_pr_status.main.load_roster", return_value=roster
    ) as load_roster_mock, patch(
        "ado_pr_status.main.scan_pull_requests", return_value=["PR"]
    ) as scan_mock, patch(
        "ado_pr_status.main.generate_report", return_value="REPORT"
    ) as report_mock:
        exit_code = orchestrate_status_scan()

    assert exit_code == 0
    parse_args_mock.assert_called_once_with()
    load_config_mock.assert_called_once_with(
        organization="org",
        project="project",
        repo_name="repo",
        status="active",
        max_workers=50,
        member_timeout_seconds=5.0,
        include_team_members=True,
    )
    ado_client_ctor_mock.assert_called_once_with(config=config)
    ado_client.resolve_repo_name_to_id.assert_called_once_with("repo")
    load_roster_mock.assert_called_once()
    ado_client.list_pull_requests.assert_called_once_with(repo_id="repo-id", status="active")
    scan_mock.assert_called_once_with(
        ado_client=ado_client,
        mapper=ANY,
        repo_id="repo-id",
        prs=ado_client.list_pull_requests.return_value,
    )
    report_mock.assert_called_once_with(repo_name="repo", pull_requests=["PR"])
    output = capsys.readouterr().out
    assert "Fetching active PRs for repository 'repo'..." in output
    assert "REPORT" in output


def test_orchestrate_status_scan_skips_roster_when_disabled():
    """Verify --no-team-members avoids the roster fetch entirely."""
    ado_client = Mock()
    ado_client.resolve_repo_name_to_id.return_value = "repo-id"
    ado_client.list_pull_requests.return_value = []

    with patch("ado_pr_status.main.parse_args", return_value=_args(include_team_members=False)), patch(
        "ado_pr_status.main.configure_logging"
    ), patch(
        "ado_pr_status.main.load_config", return_value=_config(include_team_members=False)
    ), patch("ado_pr_status.main.AdoClient", return_value=ado_client), patch(
        "ado_pr_status.main.load_roster"
    ) as load_roster_mock, patch(
        "ado_pr_status.main.generate_report", return_value="REPORT"
    ):
        exit_code = orchestrate_status_scan()

    assert exit_code == 0
    load_roster_mock.assert_not_called()


def test_orchestrate_status_scan_configuration_error_returns_config_exit_code():
    """Verify invalid configuration maps to the configuration exit code."""
    with patch("ado_pr_status.main.parse_args", return_value=_args()), patch(
        "ado_pr_status.main.configure_logging"
    ), patch(
        "ado_pr_status.main.load_config",
        side_effect=ConfigurationError("bad status"),
    ):
        exit_code = orchestrate_status_scan()

    assert exit_code == 2


def test_orchestrate_status_scan_missing_pat_returns_auth_error():
    """Verify missing PAT/authentication failures return the authentication exit code."""
    with patch("ado_pr_status.main.parse_args", return_value=_args()), patch(
        "ado_pr_status.main.configure_logging"
    ), patch(
        "ado_pr_status.main.load_config",
        side_effect=AuthenticationError("Missing required Azure DevOps Personal Access Token."),
    ):
        exit_code = orchestrate_status_scan()

    assert exit_code == 3


def test_orchestrate_status_scan_api_error_returns_api_exit_code():
    """Verify Azure DevOps API failures return the API error exit code."""
    ado_client = Mock()
    ado_client.resolve_repo_name_to_id.side_effect = ApiError("Repository not found")

    with patch("ado_pr_status.main.parse_args", return_value=_args()), patch(
        "ado_pr_status.main.configure_logging"
    ), patch(
        "ado_pr_status.main.load_config", return_value=_config()
    ), patch("ado_pr_status.main.AdoClient", return_value=ado_client):
        exit_code = orchestrate_status_scan()

    assert exit_code == 4


def test_orchestrate_status_scan_unexpected_error_returns_generic_exit_code():
    """Verify unexpected exceptions are mapped to the generic non-zero exit code."""
    with patch("ado_pr_status.main.parse_args", side_effect=RuntimeError("boom")):
        exit_code = orchestrate_status_scan()

    assert exit_code == 1
