"""Entry point orchestrating an Azure DevOps pull request status scan."""

from __future__ import annotations

import logging
import sys

from .ado_client import AdoClient
from .cli import parse_args
from .config import load_config
from .errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    DataValidationError,
    ScannerError,
)
from .mapper import PullRequestMapper
from .report import generate_report
from .scanner import load_roster, scan_pull_requests
from .team_members import TeamMembersProvider, TeamRoster

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4
EXIT_DATA_VALIDATION = 5


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def orchestrate_status_scan() -> int:
    """Run a full scan and print the report.

    Returns:
        Process exit code.
    """
    try:
        args = parse_args()
        configure_logging(args.verbose)

        config = load_config(
            organization=args.org,
            project=args.project,
            repo_name=args.repo_name,
            status=args.status,
            max_workers=args.max_workers,
            member_timeout_seconds=args.member_timeout,
            include_team_members=args.include_team_members,
        )

        ado_client = AdoClient(config=config)
        repo_id = ado_client.resolve_repo_name_to_id(config.repo_name)

        if config.include_team_members:
            roster = load_roster(TeamMembersProvider(ado_client=ado_client, config=config))
        else:
            roster = TeamRoster()
        mapper = PullRequestMapper(roster.find)

        print(f"Fetching {config.status} PRs for repository '{config.repo_name}'...")
        prs = ado_client.list_pull_requests(repo_id=repo_id, status=config.status)
        pull_requests = scan_pull_requests(
            ado_client=ado_client,
            mapper=mapper,
            repo_id=repo_id,
            prs=prs,
        )

        print(generate_report(repo_name=config.repo_name, pull_requests=pull_requests))
        return EXIT_OK
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION
    except AuthenticationError as exc:
        logger.error("Authentication error: %s", exc)
        return EXIT_AUTHENTICATION
    except ApiError as exc:
        logger.error("Azure DevOps API error: %s", exc)
        return EXIT_API
    except DataValidationError as exc:
        logger.error("Data validation error: %s", exc)
        return EXIT_DATA_VALIDATION
    except ScannerError as exc:
        logger.error("Scan failed: %s", exc)
        return EXIT_UNEXPECTED
    except Exception:
        logger.exception("Unexpected error during status scan")
        return EXIT_UNEXPECTED


def main() -> None:
    sys.exit(orchestrate_status_scan())


if __name__ == "__main__":
    main()
