"""
Multi-Repository Analysis Module.

This module generates health reports for several GitHub repositories in one
run. It coordinates mining and analysis for each configured repository,
handling:

- Per-repository report generation
- Error handling and logging
- Stopping the batch when the forge rate limit is exhausted
"""

from typing import Dict, List

from config import logger
from forge.errors import RateLimitExceeded
from miners.base import RepositoryMiner
from analyzers.models import HealthReport
from analyzers.repository import GitHubAnalyzer
from report.generator import HealthReportGenerator


class MultiRepositoryAnalyzer:
    """
    Coordinates the analysis of multiple GitHub repositories.

    Attributes:
        generator (HealthReportGenerator): Mines and analyzes one repository.
        repository_names (List[str]): owner/repo names to analyze.
    """

    def __init__(
        self,
        analyzer: GitHubAnalyzer,
        miner: RepositoryMiner,
        repository_names: List[str],
    ):
        """Initialize the multi-repository analyzer.

        Args:
            analyzer (GitHubAnalyzer): Instance for analyzing individual repositories.
            miner (RepositoryMiner): Instance for mining repository data.
            repository_names (List[str]): owner/repo names to analyze.
        """
        self.generator = HealthReportGenerator(miner, analyzer)
        self.repository_names = repository_names

    async def analyze_repositories(self) -> Dict[str, HealthReport]:
        """
        Generate a health report for every configured repository.

        Returns:
            Dict[str, HealthReport]: Mapping of repository names to reports.

        Raises:
            RateLimitExceeded: Remaining repositories are not attempted once
                the quota is exhausted.

        Note:
            Any other failure is logged and the batch continues with the
            remaining repositories.
        """
        results = {}
        for repo_name in self.repository_names:
            owner, _, repo = repo_name.strip().strip("/").partition("/")
            if not owner or not repo or "/" in repo:
                logger.error(
                    {
                        "message": "Invalid repository name, expected owner/repo",
                        "repository": repo_name,
                    }
                )
                continue

            logger.info({"message": "Analyzing repository", "repository": repo_name})
            try:
                results[f"{owner}/{repo}"] = await self.generator.generate(owner, repo)
            except RateLimitExceeded as e:
                logger.error(
                    {
                        "message": "Rate limit exhausted, stopping batch",
                        "repository": repo_name,
                        "reset_time": e.reset_time.isoformat(),
                    }
                )
                raise
            except Exception as e:
                logger.error(
                    {
                        "message": "Failed to analyze repository",
                        "repository": repo_name,
                        "error": str(e),
                    }
                )

        return results
