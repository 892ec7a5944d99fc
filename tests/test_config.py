"""Tests for configuration loading and validation."""

import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ado_pr_status.config import load_config
from ado_pr_status.errors import AuthenticationError, ConfigurationError


def test_load_config_reads_pat_from_environment(monkeypatch):
    """Verify the PAT comes from ADO_PAT and defaults are applied."""
    monkeypatch.setenv("ADO_PAT", "  secret  ")

    config = load_config(organization="org", project="proj", repo_name="repo")

    assert config.pat == "secret"
    assert config.status == "active"
    assert config.max_workers == 50
    assert config.member_timeout_seconds == 5.0
    assert config.include_team_members is True


def test_load_config_missing_pat_raises_authentication_error(monkeypatch):
    """Verify a missing PAT is reported as an authentication problem."""
    monkeypatch.delenv("ADO_PAT", raising=False)

    with pytest.raises(AuthenticationError):
        load_config(organization="org", project="proj", repo_name="repo")


@pytest.mark.parametrize(
    "overrides",
    [
        {"status": "merged"},
        {"max_workers": 0},
        {"member_timeout_seconds": 0},
        {"repo_name": "  "},
    ],
)
def test_load_config_invalid_values_raise_configuration_error(monkeypatch, overrides):
    """Verify out-of-range or unknown values are rejected."""
    monkeypatch.setenv("ADO_PAT", "secret")
    values = dict(organization="org", project="proj", repo_name="repo")
    values.update(overrides)

    with pytest.raises(ConfigurationError):
        load_config(**values)
