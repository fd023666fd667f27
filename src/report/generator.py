"""
Health Report Generation.

Entry point used by the presentation layer: mine one repository, analyze it
and return the report. Failures propagate unchanged; RateLimitExceeded in
particular reaches the caller as-is so it can be rendered with a countdown.
"""

from datetime import datetime, timezone
from typing import Optional

from config import settings, logger
from forge.client import GitHubClient
from miners.base import RepositoryMiner
from miners.github_miner import GitHubMiner
from analyzers.models import HealthReport
from analyzers.repository import GitHubAnalyzer


class HealthReportGenerator:
    """Couples a miner and an analyzer into a single report run."""

    def __init__(
        self, miner: RepositoryMiner, analyzer: Optional[GitHubAnalyzer] = None
    ):
        self.miner = miner
        self.analyzer = analyzer or GitHubAnalyzer()

    async def generate(self, owner: str, repo: str) -> HealthReport:
        """
        Generate the health report of owner/repo.

        Raises:
            RateLimitExceeded: If the forge quota ran out during mining
            NotFound: If the repository does not exist
            Exception: Any other fetch failure, no partial report is returned
        """
        repo_data = await self.miner.mine_repository(owner, repo)
        report = self.analyzer.analyze_repository(
            repo_data, generated_at=datetime.now(timezone.utc)
        )
        logger.info(
            {
                "message": "Health report generated",
                "repository": f"{owner}/{repo}",
                "overall_score": report.overall_score,
                "generated_at": report.generated_at.isoformat(),
            }
        )
        return report


async def generate_health_report(
    owner: str, repo: str, credential: Optional[str] = None
) -> HealthReport:
    """
    Generate a health report for a GitHub repository.

    Args:
        owner (str): Repository owner
        repo (str): Repository name
        credential (Optional[str]): GitHub token. None falls back to the
            configured token; an empty string requests public access

    Returns:
        HealthReport: The report
    """
    token = settings.token if credential is None else credential
    client = GitHubClient(token=token)
    try:
        return await HealthReportGenerator(GitHubMiner(client)).generate(owner, repo)
    finally:
        client.close()
