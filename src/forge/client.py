"""
GitHub REST Client Module.

Typed, read-only access to the GitHub REST API for a single report run. Built
on PyGithub's requester so every call carries the pinned API version header and
exposes the rate-limit headers of its response.

Failures are classified once, here:
- rate-limit responses become RateLimitExceeded
- missing resources become NotFound
- refusals on privilege-gated endpoints degrade to an empty result when no
  token was supplied, and become AuthorizationDenied otherwise

Everything else is re-raised untouched. PyGithub's own retry is disabled.
"""

import asyncio
import base64
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from github import Auth, Github, GithubException
from github import RateLimitExceededException, UnknownObjectException

from config import settings, logger
from forge import endpoints
from forge.endpoints import Endpoint
from forge.errors import AuthorizationDenied, ForgeError, NotFound, RateLimitExceeded
from forge.models import (
    CommitRecord,
    ContributorRecord,
    DirectoryEntry,
    IssueRecord,
    PullRequestRecord,
    ReleaseRecord,
    RepositorySnapshot,
    WorkflowRunRecord,
)

# GitHub's documented primary quotas, used when a response omits the headers
UNAUTHENTICATED_LIMIT = 60
AUTHENTICATED_LIMIT = 5000
MAX_PER_PAGE = 100


def _lower_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {str(k).lower(): v for k, v in (headers or {}).items()}


def _error_message(error: GithubException) -> str:
    data = error.data
    if isinstance(data, dict):
        return str(data.get("message", ""))
    return str(data or "")


class GitHubClient:
    """
    GitHub API access with error classification and graceful degradation.

    The client holds no mutable state besides a semaphore that bounds the
    number of in-flight requests, so one instance can serve all concurrent
    fetches of a report run.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[int] = None,
        max_concurrent_requests: Optional[int] = None,
        github: Optional[Github] = None,
    ):
        """Initialize the client.

        Args:
            token (Optional[str]): Bearer token. None selects public access.
            base_url (Optional[str]): API base URL, defaults to settings.
            api_version (Optional[str]): X-GitHub-Api-Version header value.
            timeout (Optional[int]): Per-request timeout in seconds.
            max_concurrent_requests (Optional[int]): In-flight request bound.
            github (Optional[Github]): Preconfigured PyGithub instance.
        """
        self.token = token or None
        self.api_version = api_version or settings.github_api_version
        concurrency = max_concurrent_requests or settings.max_concurrent_requests
        self.github = github or Github(
            auth=Auth.Token(self.token) if self.token else None,
            base_url=base_url or settings.github_api_url,
            timeout=timeout or settings.request_timeout,
            retry=None,
            pool_size=concurrency,
        )
        self._semaphore = asyncio.Semaphore(concurrency)

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def close(self) -> None:
        """Release the underlying connection pool."""
        self.github.close()

    # -- transport -------------------------------------------------------

    async def _request(
        self,
        endpoint: Endpoint,
        parameters: Optional[Dict[str, Any]] = None,
        **path_params: str,
    ) -> Any:
        """
        Issue a GET request for an endpoint and return the decoded JSON body.

        Raises:
            RateLimitExceeded: If the forge reports an exhausted quota
            NotFound: If the resource does not exist
            AuthorizationDenied: If access was refused and cannot be degraded
            GithubException: For any other unexpected status
        """
        url = endpoint.url(**path_params).rstrip("/")
        headers = {"X-GitHub-Api-Version": self.api_version}

        async with self._semaphore:
            try:
                response_headers, data = await asyncio.to_thread(
                    self.github.requester.requestJsonAndCheck,
                    "GET",
                    url,
                    parameters=parameters,
                    headers=headers,
                )
            except GithubException as e:
                error = self._classify(e, url)
                if error is None:
                    logger.error(
                        {
                            "message": "GitHub request failed",
                            "endpoint": endpoint.name,
                            "url": url,
                            "status": e.status,
                            "error": str(e),
                        }
                    )
                    raise

                if (
                    isinstance(error, AuthorizationDenied)
                    and endpoint.requires_elevated_scope
                    and not self.authenticated
                ):
                    logger.warning(
                        {
                            "message": "Endpoint refused without a token, using empty result",
                            "endpoint": endpoint.name,
                            "url": url,
                            "status": e.status,
                        }
                    )
                    return endpoint.degraded_result()

                if isinstance(error, NotFound):
                    logger.debug({"message": "Resource not found", "url": url})
                else:
                    logger.error(
                        {
                            "message": "GitHub request refused",
                            "endpoint": endpoint.name,
                            "url": url,
                            "error": str(error),
                        }
                    )
                raise error from e

        self._check_rate_limit(response_headers, endpoint.name)
        return data

    def _classify(self, error: GithubException, resource: str) -> Optional[ForgeError]:
        """Map a PyGithub exception onto the forge error taxonomy."""
        status = error.status
        rate_limited = isinstance(error, RateLimitExceededException) or (
            status in (403, 429) and "rate limit" in _error_message(error).lower()
        )
        if rate_limited:
            return self._rate_limit_error(error.headers, status)
        if isinstance(error, UnknownObjectException) or status == 404:
            return NotFound(resource, status)
        if status in (401, 403):
            return AuthorizationDenied(resource, status)
        return None

    def _rate_limit_error(
        self, headers: Optional[Mapping[str, Any]], status: Optional[int]
    ) -> RateLimitExceeded:
        headers = _lower_headers(headers)
        now = datetime.now(timezone.utc)

        if "x-ratelimit-reset" in headers:
            reset_time = datetime.fromtimestamp(
                int(headers["x-ratelimit-reset"]), tz=timezone.utc
            )
        elif "retry-after" in headers:
            reset_time = now + timedelta(seconds=int(headers["retry-after"]))
        else:
            # Primary quotas reset hourly
            reset_time = now + timedelta(hours=1)

        default_limit = (
            AUTHENTICATED_LIMIT if self.authenticated else UNAUTHENTICATED_LIMIT
        )
        limit = int(headers.get("x-ratelimit-limit", default_limit))

        logger.critical(
            {
                "message": "GitHub API rate limit exhausted",
                "limit": limit,
                "reset_time": reset_time.isoformat(),
                "wait_time_seconds": (reset_time - now).total_seconds(),
            }
        )
        return RateLimitExceeded(reset_time=reset_time, limit=limit, status=status)

    def _check_rate_limit(
        self, headers: Optional[Mapping[str, Any]], check_name: str
    ) -> None:
        """
        Log the quota reported by a successful response.

        Args:
            headers (Optional[Mapping[str, Any]]): Response headers
            check_name (str): Identifier of the endpoint that was called
        """
        headers = _lower_headers(headers)
        if "x-ratelimit-remaining" not in headers:
            return

        remaining = int(headers["x-ratelimit-remaining"])
        limit = int(headers.get("x-ratelimit-limit", 0))
        status = {
            "message": f"{check_name} API rate limit status",
            "remaining_points": remaining,
            "total_points": limit,
        }
        if "x-ratelimit-reset" in headers:
            status["reset_time"] = datetime.fromtimestamp(
                int(headers["x-ratelimit-reset"]), tz=timezone.utc
            ).isoformat()

        if remaining == 0:
            logger.critical({**status, "message": "GitHub API rate limit used up"})
        elif remaining < limit * 0.1:
            logger.warning({**status, "message": "GitHub API rate limit running low"})
        else:
            logger.debug(status)

    # -- operations ------------------------------------------------------

    async def get_repository(self, owner: str, repo: str) -> RepositorySnapshot:
        """Fetch repository metadata."""
        data = await self._request(endpoints.REPOSITORY, owner=owner, repo=repo)
        account = data.get("owner") or {}
        return RepositorySnapshot.model_validate(
            {
                **data,
                "owner_login": account.get("login"),
                "avatar_url": account.get("avatar_url"),
            }
        )

    async def get_commits(
        self, owner: str, repo: str, count: int = 30
    ) -> List[CommitRecord]:
        """
        Fetch the most recent commits on the default branch.

        The forge's reverse-chronological order is preserved.
        """
        data = await self._request(
            endpoints.COMMITS,
            {"per_page": min(count, MAX_PER_PAGE)},
            owner=owner,
            repo=repo,
        )
        return [self._to_commit(item) for item in data]

    async def get_languages(self, owner: str, repo: str) -> Dict[str, int]:
        """Fetch language name to byte count mapping."""
        data = await self._request(endpoints.LANGUAGES, owner=owner, repo=repo)
        # PyGithub adds the request path as "url" to dict bodies
        return {
            str(name): size
            for name, size in data.items()
            if isinstance(size, int) and not isinstance(size, bool)
        }

    async def get_contributors(
        self, owner: str, repo: str, count: int = 30
    ) -> List[ContributorRecord]:
        data = await self._request(
            endpoints.CONTRIBUTORS,
            {"per_page": min(count, MAX_PER_PAGE)},
            owner=owner,
            repo=repo,
        )
        # 204 No Content for empty repositories
        return [ContributorRecord.model_validate(item) for item in data or []]

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        """
        Fetch and decode a file.

        Raises:
            NotFound: If the path does not exist
        """
        data = await self._request(
            endpoints.CONTENTS, owner=owner, repo=repo, path=quote(path)
        )
        if not isinstance(data, dict):
            # Path is a directory
            return ""
        content = data.get("content") or ""
        if data.get("encoding") == "base64":
            return base64.b64decode(content).decode("utf-8", errors="replace")
        return content

    async def get_directory_contents(
        self, owner: str, repo: str, path: str = ""
    ) -> List[DirectoryEntry]:
        """
        List a directory, the repository root by default.

        Raises:
            NotFound: If the path does not exist
        """
        data = await self._request(
            endpoints.CONTENTS, owner=owner, repo=repo, path=quote(path)
        )
        items = data if isinstance(data, list) else [data]
        return [DirectoryEntry.model_validate(item) for item in items]

    async def get_workflow_runs(
        self, owner: str, repo: str, count: int = 100
    ) -> List[WorkflowRunRecord]:
        """Fetch recent CI workflow runs, newest first."""
        data = await self._request(
            endpoints.WORKFLOW_RUNS,
            {"per_page": min(count, MAX_PER_PAGE)},
            owner=owner,
            repo=repo,
        )
        if isinstance(data, dict):
            data = data.get("workflow_runs") or []
        return [WorkflowRunRecord.model_validate(item) for item in data]

    async def get_pull_requests(
        self, owner: str, repo: str, state: str = "all", count: int = 100
    ) -> List[PullRequestRecord]:
        """Fetch pull requests sorted by last update, newest first."""
        data = await self._request(
            endpoints.PULL_REQUESTS,
            {
                "state": state,
                "per_page": min(count, MAX_PER_PAGE),
                "sort": "updated",
                "direction": "desc",
            },
            owner=owner,
            repo=repo,
        )
        return [PullRequestRecord.model_validate(item) for item in data]

    async def get_issues(
        self, owner: str, repo: str, state: str = "all", count: int = 100
    ) -> List[IssueRecord]:
        """Fetch issues (pull requests included) sorted by last update."""
        data = await self._request(
            endpoints.ISSUES,
            {
                "state": state,
                "per_page": min(count, MAX_PER_PAGE),
                "sort": "updated",
                "direction": "desc",
            },
            owner=owner,
            repo=repo,
        )
        return [self._to_issue(item) for item in data]

    async def get_releases(
        self, owner: str, repo: str, count: int = 50
    ) -> List[ReleaseRecord]:
        data = await self._request(
            endpoints.RELEASES,
            {"per_page": min(count, MAX_PER_PAGE)},
            owner=owner,
            repo=repo,
        )
        return [ReleaseRecord.model_validate(item) for item in data]

    async def get_code_frequency_stats(
        self, owner: str, repo: str
    ) -> List[List[int]]:
        """
        Weekly [timestamp, additions, deletions] triples.

        Empty while the forge is still computing the statistics (202).
        """
        data = await self._request(endpoints.CODE_FREQUENCY, owner=owner, repo=repo)
        if not isinstance(data, list):
            return []
        return [[int(value) for value in week] for week in data]

    async def get_commit_activity(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """Weekly commit totals for the last year, empty while computing."""
        data = await self._request(endpoints.COMMIT_ACTIVITY, owner=owner, repo=repo)
        return data if isinstance(data, list) else []

    # -- converters ------------------------------------------------------

    @staticmethod
    def _to_commit(item: Dict[str, Any]) -> CommitRecord:
        commit = item.get("commit") or {}
        author = commit.get("author") or {}
        return CommitRecord.model_validate(
            {
                "sha": item.get("sha"),
                "author_name": author.get("name"),
                "author_email": author.get("email"),
                "authored_at": author.get("date"),
                "message": commit.get("message") or "",
            }
        )

    @staticmethod
    def _to_issue(item: Dict[str, Any]) -> IssueRecord:
        return IssueRecord.model_validate(
            {
                **item,
                "labels": [
                    label["name"] if isinstance(label, dict) else str(label)
                    for label in item.get("labels") or []
                ],
                "comments": item.get("comments") or 0,
                "is_pull_request": "pull_request" in item,
            }
        )
