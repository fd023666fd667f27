"""
Main Application Entry Point.

This module serves as the primary entry point for the repository health
report system. It orchestrates the workflow, including:
- Forge client initialization
- Report generation for every configured repository
- Emitting each report as JSON on stdout
- Error handling and logging

Repositories are configured with the GITHUB_REPOSITORIES environment variable
(comma-separated owner/repo names) and an optional GITHUB_TOKEN.
"""

import asyncio
import json
import sys

from config import settings, logger
from forge.client import GitHubClient
from forge.errors import RateLimitExceeded
from miners.github_miner import GitHubMiner
from analyzers.multi_repository import MultiRepositoryAnalyzer
from analyzers.repository import GitHubAnalyzer


async def main() -> int:
    """
    Execute the main application workflow.

    Returns:
        int: Process exit status
    """
    repository_names = settings.repository_names
    if not repository_names:
        logger.error("No repositories configured, set GITHUB_REPOSITORIES")
        return 2

    if settings.token is None:
        logger.warning(
            "No GitHub token configured, using public access with a low rate limit"
        )

    logger.debug("initializing github client...")
    client = GitHubClient(token=settings.token)
    multi_analyzer = MultiRepositoryAnalyzer(
        GitHubAnalyzer(), GitHubMiner(client), repository_names
    )

    logger.info("generating health reports...")
    try:
        reports = await multi_analyzer.analyze_repositories()
    except RateLimitExceeded as e:
        logger.error(e.describe())
        return 1
    finally:
        client.close()

    for repo_name, report in reports.items():
        logger.info(
            {
                "message": "Report summary",
                "repository": repo_name,
                "overall_score": report.overall_score,
                "benchmark_score": report.benchmark_score,
                "above_benchmark": report.above_benchmark,
            }
        )
        print(json.dumps(report.to_payload(), indent=2))

    logger.info("application finished")
    return 0 if len(reports) == len(repository_names) else 1


if __name__ == "__main__":
    logger.info("Starting application ...")
    sys.exit(asyncio.run(main()))
