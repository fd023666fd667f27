"""
GitHub Repository Data Mining Module.

This module collects every forge resource a health report needs. The repository
snapshot is fetched first; all other resources are independent of each other
and are fetched concurrently. The first failure cancels the outstanding
fetches and is re-raised as-is, so an exhausted rate limit stops the run
without spending more quota.
"""

import asyncio
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

from config import settings, logger
from forge.client import GitHubClient
from forge.errors import NotFound
from forge.models import DirectoryEntry
from miners.base import RepositoryMiner
from miners.models import PACKAGE_JSON, WORKFLOWS_DIR, MANIFEST_FILES, RepositoryData

T = TypeVar("T")


async def gather_fail_fast(*aws: Awaitable[Any]) -> List[Any]:
    """
    Run awaitables concurrently and return their results in order.

    On the first exception the remaining tasks are cancelled and that
    exception is raised unchanged.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []
    try:
        done, pending = await asyncio.wait(
            tasks, return_when=asyncio.FIRST_EXCEPTION
        )
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    failed = [
        task for task in tasks
        if task in done and not task.cancelled() and task.exception() is not None
    ]
    if failed:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        raise failed[0].exception()

    return [task.result() for task in tasks]


async def optional(aw: Awaitable[T]) -> Optional[T]:
    """Await a probe, mapping NotFound to None."""
    try:
        return await aw
    except NotFound:
        return None


class GitHubMiner(RepositoryMiner):
    """
    GitHubMiner is responsible for mining data from GitHub repositories.
    It fans out to the forge client and bundles the results into RepositoryData.
    """

    def __init__(
        self,
        client: GitHubClient,
        commit_count: Optional[int] = None,
        pull_request_count: Optional[int] = None,
        issue_count: Optional[int] = None,
        release_count: Optional[int] = None,
        workflow_run_count: Optional[int] = None,
    ):
        """Initialize GitHub miner with a client and sample sizes.

        Args:
            client (GitHubClient): Forge client used for every request.
            commit_count (Optional[int]): Number of recent commits to fetch.
            pull_request_count (Optional[int]): Number of pull requests to fetch.
            issue_count (Optional[int]): Number of issues to fetch.
            release_count (Optional[int]): Number of releases to fetch.
            workflow_run_count (Optional[int]): Number of workflow runs to fetch.
        """
        self.client = client
        self.commit_count = commit_count or settings.commit_sample_size
        self.pull_request_count = pull_request_count or settings.pull_request_sample_size
        self.issue_count = issue_count or settings.issue_sample_size
        self.release_count = release_count or settings.release_sample_size
        self.workflow_run_count = workflow_run_count or settings.workflow_run_sample_size

    async def _probe_tree(self, owner: str, repo: str) -> Dict[str, Any]:
        """
        List the repository root and fetch the files the estimators inspect.

        Missing paths are expected and yield empty results.
        """
        root: List[DirectoryEntry] = (
            await optional(self.client.get_directory_contents(owner, repo, ""))
            or []
        )
        file_names = {entry.name for entry in root if entry.type == "file"}
        dir_names = {entry.name for entry in root if entry.type == "dir"}

        paths = []
        if PACKAGE_JSON in file_names:
            paths.append(PACKAGE_JSON)
        manifest = next((name for name in MANIFEST_FILES if name in file_names), None)
        if manifest and manifest not in paths:
            paths.append(manifest)

        probes = [
            optional(self.client.get_file_content(owner, repo, path)) for path in paths
        ]
        if ".github" in dir_names:
            probes.append(
                optional(self.client.get_directory_contents(owner, repo, WORKFLOWS_DIR))
            )

        results = await gather_fail_fast(*probes)
        files = {
            path: content
            for path, content in zip(paths, results)
            if content is not None
        }
        workflow_files = (results[len(paths)] or []) if ".github" in dir_names else []

        return {"root_entries": root, "files": files, "workflow_files": workflow_files}

    async def mine_repository(self, owner: str, repo: str) -> RepositoryData:
        """
        Extract and transform data from a specified GitHub repository.

        Args:
            owner (str): Repository owner.
            repo (str): Repository name.

        Returns:
            RepositoryData: A Pydantic model containing the mined repository data.

        Raises:
            RateLimitExceeded: If the forge quota is exhausted.
            NotFound: If the repository does not exist.
            Exception: Any other fetch failure.
        """
        repo_name = f"{owner}/{repo}"
        logger.info({"message": "Starting repository mining", "repository": repo_name})

        try:
            repository = await self.client.get_repository(owner, repo)

            (
                commits,
                languages,
                pull_requests,
                issues,
                releases,
                workflow_runs,
                tree,
            ) = await gather_fail_fast(
                self.client.get_commits(owner, repo, self.commit_count),
                self.client.get_languages(owner, repo),
                self.client.get_pull_requests(
                    owner, repo, "all", self.pull_request_count
                ),
                self.client.get_issues(owner, repo, "all", self.issue_count),
                self.client.get_releases(owner, repo, self.release_count),
                self.client.get_workflow_runs(owner, repo, self.workflow_run_count),
                self._probe_tree(owner, repo),
            )
        except Exception as e:
            logger.error(
                {
                    "message": "Repository mining failed",
                    "repository": repo_name,
                    "error": str(e),
                }
            )
            raise

        logger.info(
            {
                "message": "Repository mining completed",
                "repository": repo_name,
                "commits": len(commits),
                "pull_requests": len(pull_requests),
                "releases": len(releases),
                "workflow_runs": len(workflow_runs),
            }
        )
        return RepositoryData(
            repository=repository,
            commits=commits,
            languages=languages,
            pull_requests=pull_requests,
            issues=issues,
            releases=releases,
            workflow_runs=workflow_runs,
            **tree,
        )
