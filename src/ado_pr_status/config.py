"""Configuration parsing and validation for the ADO PR status scanner."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import AuthenticationError, ConfigurationError

PULL_REQUEST_STATUSES = ("active", "completed", "abandoned", "all")


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the status scanner."""

    organization: str
    project: str
    repo_name: str
    pat: str
    status: str = "active"
    max_workers: int = 50
    member_timeout_seconds: float = 5.0
    include_team_members: bool = True


def load_config(
    organization: str,
    project: str,
    repo_name: str,
    status: str = "active",
    max_workers: int = 50,
    member_timeout_seconds: float = 5.0,
    include_team_members: bool = True,
) -> Config:
    """Build and validate application configuration.

    Args:
        organization: Azure DevOps organization name.
        project: Azure DevOps project name.
        repo_name: Azure DevOps repository name.
        status: Pull request status filter sent to the list endpoint.
        max_workers: Width of the worker pool used for the team roster fetch.
        member_timeout_seconds: Time allowed for a single team's member fetch.
        include_team_members: Whether to fetch the team roster at all.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If a value is out of range or unknown.
        AuthenticationError: If ``ADO_PAT`` is not configured.
    """
    if not organization.strip() or not project.strip() or not repo_name.strip():
        raise ConfigurationError("Organization, project and repository name must not be empty.")

    if status not in PULL_REQUEST_STATUSES:
        raise ConfigurationError(
            f"Invalid value for 'status': expected one of {', '.join(PULL_REQUEST_STATUSES)}."
        )

    if max_workers <= 0:
        raise ConfigurationError("Invalid value for 'max_workers': expected an integer greater than 0.")

    if member_timeout_seconds <= 0:
        raise ConfigurationError("Invalid value for 'member_timeout_seconds': expected a positive number.")

    pat: str = os.getenv("ADO_PAT", "").strip()
    if not pat:
        raise AuthenticationError(
            "Missing required Azure DevOps Personal Access Token. "
            "Set the 'ADO_PAT' environment variable before running the status scanner."
        )

    return Config(
        organization=organization,
        project=project,
        repo_name=repo_name,
        pat=pat,
        status=status,
        max_workers=max_workers,
        member_timeout_seconds=member_timeout_seconds,
        include_team_members=include_team_members,
    )
