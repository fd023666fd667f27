"""
GitHub REST Endpoint Table.

Each endpoint the client calls is declared once here together with its access
policy. Endpoints that need elevated token scopes on some repositories fall
back to their degraded result when an unauthenticated client is refused.
"""

from typing import Any, Callable, NamedTuple


class Endpoint(NamedTuple):
    """Declarative description of a read-only forge endpoint."""

    name: str
    path: str
    requires_elevated_scope: bool = False
    degraded_result: Callable[[], Any] = list

    def url(self, **path_params: str) -> str:
        """Render the endpoint path with owner/repo and other parameters."""
        return self.path.format(**path_params)


REPOSITORY = Endpoint("repository", "/repos/{owner}/{repo}")
COMMITS = Endpoint("commits", "/repos/{owner}/{repo}/commits")
LANGUAGES = Endpoint("languages", "/repos/{owner}/{repo}/languages")
CONTRIBUTORS = Endpoint("contributors", "/repos/{owner}/{repo}/contributors")
CONTENTS = Endpoint("contents", "/repos/{owner}/{repo}/contents/{path}")
WORKFLOW_RUNS = Endpoint(
    "workflow_runs",
    "/repos/{owner}/{repo}/actions/runs",
    requires_elevated_scope=True,
)
PULL_REQUESTS = Endpoint(
    "pull_requests",
    "/repos/{owner}/{repo}/pulls",
    requires_elevated_scope=True,
)
ISSUES = Endpoint(
    "issues",
    "/repos/{owner}/{repo}/issues",
    requires_elevated_scope=True,
)
RELEASES = Endpoint("releases", "/repos/{owner}/{repo}/releases")
CODE_FREQUENCY = Endpoint(
    "code_frequency", "/repos/{owner}/{repo}/stats/code_frequency"
)
COMMIT_ACTIVITY = Endpoint(
    "commit_activity", "/repos/{owner}/{repo}/stats/commit_activity"
)
