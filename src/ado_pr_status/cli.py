"""Command-line argument parsing for the ADO PR status scanner."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import PULL_REQUEST_STATUSES


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a number") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a status scan.

    Returns:
        Parsed CLI arguments containing organization, project, repository
        name, status filter and roster fetch settings.
    """
    parser = argparse.ArgumentParser(
        prog="ado-pr-status-scanner",
        description=(
            "Classify Azure DevOps pull requests of a repository by review "
            "status (conflicts, failing checks, outstanding comments, ready to merge, ...)."
        ),
    )

    parser.add_argument(
        "--org",
        required=True,
        help="Azure DevOps organization name.",
    )
    parser.add_argument(
        "--project",
        required=True,
        help="Azure DevOps project name.",
    )
    parser.add_argument(
        "--repo-name",
        required=True,
        help="Azure DevOps repository name to scan.",
    )
    parser.add_argument(
        "--status",
        choices=PULL_REQUEST_STATUSES,
        default="active",
        help="Pull request status filter (default: active).",
    )
    parser.add_argument(
        "--max-workers",
        type=_positive_int,
        default=50,
        help="Parallel team member fetches when building the roster (default: 50).",
    )
    parser.add_argument(
        "--member-timeout",
        type=_positive_float,
        default=5.0,
        help="Seconds allowed for one team's member fetch (default: 5).",
    )
    parser.add_argument(
        "--no-team-members",
        dest="include_team_members",
        action="store_false",
        help="Skip the team roster fetch.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
