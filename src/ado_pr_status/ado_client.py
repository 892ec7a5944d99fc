"""Azure DevOps REST API client for pull request status scanning."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests
from requests.auth import HTTPBasicAuth

from .config import Config
from .errors import ApiError, AuthenticationError, DataValidationError
from .models import PullRequestContext, Repository

logger = logging.getLogger(__name__)


class AdoClient:
    """Small client for the Azure DevOps Git pull request and team APIs."""

    _API_VERSION = "7.1"
    _TEAMS_API_VERSION = "7.1-preview.2"
    _PAGE_SIZE = 100
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated Azure DevOps API client.

        Args:
            config: Validated runtime configuration including org/project/PAT.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._config = config
        self._timeout_seconds = timeout_seconds
        self._org_url = f"https://dev.azure.com/{config.organization}"
        self._base_url = f"{self._org_url}/{config.project}/_apis"

        self._session = requests.Session()
        self._session.auth = HTTPBasicAuth("", config.pat)
        self._session.headers.update({"Accept": "application/json"})

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below ``_apis``."""
        return f"{self._base_url}/{path.lstrip('/')}"

    def _build_org_url(self, path: str) -> str:
        """Build an organization-level API URL (used by the teams endpoints)."""
        return f"{self._org_url}/_apis/{path.lstrip('/')}"

    def _extract_backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Compute exponential backoff seconds, honoring Retry-After when available."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                retry_after_seconds = int(retry_after_header)
                return min(self._MAX_BACKOFF_SECONDS, max(1, retry_after_seconds))
            except ValueError:
                pass

        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        url: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Execute a GET request with retry logic for 429/5xx responses.

        Raises:
            AuthenticationError: If the server answers 401 or 403.
            ApiError: If the request repeatedly fails, returns HTTP >= 400,
                or does not return valid JSON.
        """
        url = url or self._build_url(path)
        query = dict(params or {})
        query["api-version"] = api_version or self._API_VERSION

        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.get(url, params=query, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                if attempt == self._MAX_RETRIES:
                    raise ApiError(f"Azure DevOps request failed after retries: GET {url}") from exc
                logger.debug(
                    "Retrying Azure DevOps request after transport error",
                    extra={"url": url, "attempt": attempt},
                )
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            status_code = response.status_code
            is_retryable = status_code == 429 or 500 <= status_code <= 599

            if is_retryable and attempt < self._MAX_RETRIES:
                logger.debug(
                    "Retrying Azure DevOps request",
                    extra={"url": url, "attempt": attempt, "status_code": status_code},
                )
                time.sleep(self._extract_backoff_seconds(response, attempt))
                continue

            if status_code in (401, 403):
                raise AuthenticationError(
                    f"Azure DevOps rejected the credentials: GET {url} returned {status_code}"
                )

            if status_code >= 400:
                raise ApiError(
                    "Azure DevOps API request failed: "
                    f"GET {url} returned {status_code} - {response.text}"
                )

            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(f"Azure DevOps API returned invalid JSON: GET {url}") from exc

            if not isinstance(payload, dict):
                raise ApiError(f"Azure DevOps API returned unexpected payload shape: GET {url}")

            return payload

        raise ApiError(f"Azure DevOps request failed after retries: GET {url}") from last_error

    def _get_all(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        url: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Collect every ``value`` item of an endpoint using ``$top``/``$skip`` paging."""
        items: List[Dict[str, Any]] = []
        skip = 0

        while True:
            query: Dict[str, Any] = dict(params or {})
            query["$top"] = self._PAGE_SIZE
            query["$skip"] = skip

            payload = self._get_json(path, params=query, url=url, api_version=api_version)
            page_items = payload.get("value", [])
            items.extend(item for item in page_items if isinstance(item, dict))

            if len(page_items) < self._PAGE_SIZE:
                break

            skip += self._PAGE_SIZE

        return items

    def list_repositories(self) -> List[Repository]:
        """List repositories in the configured Azure DevOps project."""
        payload = self._get_json("git/repositories")
        repositories: List[Repository] = []

        for item in payload.get("value", []):
            repo_id = item.get("id")
            repo_name = item.get("name")
            if repo_id and repo_name:
                repositories.append(
                    Repository(id=str(repo_id), name=str(repo_name), url=str(item.get("url") or ""))
                )

        return repositories

    def resolve_repo_name_to_id(self, repo_name: str) -> str:
        """Resolve a repository name to repository ID using case-insensitive matching.

        Raises:
            ApiError: If no repository with the given name exists in the project.
        """
        normalized = repo_name.strip().lower()
        for repository in self.list_repositories():
            if repository.name.lower() == normalized:
                return repository.id

        raise ApiError(f"Repository '{repo_name}' was not found in project '{self._config.project}'.")

    def list_pull_requests(self, repo_id: str, status: str = "active") -> List[Dict[str, Any]]:
        """List raw pull request payloads for a repository filtered by status."""
        return self._get_all(
            f"git/repositories/{repo_id}/pullrequests",
            params={"searchCriteria.status": status},
        )

    def list_threads(self, repo_id: str, pr_id: int) -> List[Dict[str, Any]]:
        """List discussion threads, comments included, for a pull request."""
        payload = self._get_json(f"git/repositories/{repo_id}/pullRequests/{pr_id}/threads")
        return [item for item in payload.get("value", []) if isinstance(item, dict)]

    def list_statuses(self, repo_id: str, pr_id: int) -> List[Dict[str, Any]]:
        """List build/check statuses posted against a pull request's iterations."""
        payload = self._get_json(f"git/repositories/{repo_id}/pullRequests/{pr_id}/statuses")
        return [item for item in payload.get("value", []) if isinstance(item, dict)]

    def get_pull_request_context(self, repo_id: str, pull_request: Dict[str, Any]) -> PullRequestContext:
        """Fetch threads and statuses for a listed pull request."""
        pr_id = pull_request.get("pullRequestId")
        if pr_id is None:
            raise DataValidationError(f"Pull request payload is missing 'pullRequestId': repo_id={repo_id}")

        return PullRequestContext(
            pull_request=pull_request,
            threads=self.list_threads(repo_id, int(pr_id)),
            statuses=self.list_statuses(repo_id, int(pr_id)),
        )

    def list_teams(self) -> List[Dict[str, Any]]:
        """List teams defined in the configured project."""
        return self._get_all(
            "",
            url=self._build_org_url(f"projects/{self._config.project}/teams"),
            api_version=self._TEAMS_API_VERSION,
        )

    def list_team_members(self, team_id: str) -> List[Dict[str, Any]]:
        """List raw ``TeamMember`` payloads (each wrapping an ``identity``) of a team."""
        return self._get_all(
            "",
            url=self._build_org_url(f"projects/{self._config.project}/teams/{team_id}/members"),
            api_version=self._TEAMS_API_VERSION,
        )
