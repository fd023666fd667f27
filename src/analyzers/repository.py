"""
GitHub Repository Analysis Module.

Turns mined repository data into a health report:
- code volume estimates
- code quality from commit hygiene
- technical debt
- deployment performance
- overall weighted score and benchmark comparison

Analysis is synchronous and performs no I/O; all forge access happens in the
miner beforehand.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from config import logger
from miners.models import RepositoryData
from analyzers.benchmark import benchmark_score
from analyzers.code_metrics import CodeMetricsAnalyzer
from analyzers.code_quality import CodeQualityAnalyzer
from analyzers.deployment import DeploymentAnalyzer
from analyzers.models import HealthReport
from analyzers.technical_debt import TechnicalDebtAnalyzer

# Weights in tenths: 30% quality, 40% debt, 30% deployment
QUALITY_WEIGHT = 3
DEBT_WEIGHT = 4
DEPLOYMENT_WEIGHT = 3


def overall_score(quality: int, debt: int, deployment: int) -> int:
    """Weighted overall score, floored."""
    return (
        QUALITY_WEIGHT * quality + DEBT_WEIGHT * debt + DEPLOYMENT_WEIGHT * deployment
    ) // 10


class GitHubAnalyzer:
    """
    GitHub repository analyzer.

    Runs the four estimators over one RepositoryData bundle and composes the
    HealthReport.
    """

    def __init__(
        self,
        code_metrics: Optional[CodeMetricsAnalyzer] = None,
        code_quality: Optional[CodeQualityAnalyzer] = None,
        technical_debt: Optional[TechnicalDebtAnalyzer] = None,
        deployment: Optional[DeploymentAnalyzer] = None,
        benchmarks: Optional[Dict[str, int]] = None,
    ):
        """
        Initialize the GitHubAnalyzer with its estimators.

        Args:
            code_metrics (Optional[CodeMetricsAnalyzer]): Code volume estimator
            code_quality (Optional[CodeQualityAnalyzer]): Code quality estimator
            technical_debt (Optional[TechnicalDebtAnalyzer]): Debt estimator
            deployment (Optional[DeploymentAnalyzer]): Deployment estimator
            benchmarks (Optional[Dict[str, int]]): Language benchmark table override
        """
        self.code_metrics = code_metrics or CodeMetricsAnalyzer()
        self.code_quality = code_quality or CodeQualityAnalyzer()
        self.technical_debt = technical_debt or TechnicalDebtAnalyzer()
        self.deployment = deployment or DeploymentAnalyzer()
        self.benchmarks = benchmarks

    def analyze_repository(
        self, repo_data: RepositoryData, generated_at: Optional[datetime] = None
    ) -> HealthReport:
        """
        Perform the health analysis of a GitHub repository.

        Args:
            repo_data (RepositoryData): Repository data
            generated_at (Optional[datetime]): Report timestamp, also the
                reference time for age-based estimates

        Returns:
            HealthReport: Complete health report
        """
        generated_at = generated_at or datetime.now(timezone.utc)
        logger.info(
            {
                "message": "Starting repository analysis",
                "repository": repo_data.repository_name,
            }
        )

        code_metrics = self.code_metrics.analyze(
            repo_data.repository, repo_data.languages
        )
        code_quality = self.code_quality.analyze(repo_data.commits)
        technical_debt = self.technical_debt.analyze(repo_data, generated_at)
        deployment_metrics = self.deployment.analyze(repo_data, generated_at)

        report = HealthReport(
            repository=repo_data.repository,
            code_metrics=code_metrics,
            code_quality=code_quality,
            technical_debt=technical_debt,
            deployment_metrics=deployment_metrics,
            overall_score=overall_score(
                code_quality.score, technical_debt.score, deployment_metrics.score
            ),
            benchmark_score=benchmark_score(repo_data.repository, self.benchmarks),
            generated_at=generated_at,
        )

        logger.info(
            {
                "message": "Repository analysis completed",
                "repository": repo_data.repository_name,
                "overall_score": report.overall_score,
                "code_quality": code_quality.score,
                "technical_debt": technical_debt.score,
                "deployment": deployment_metrics.score,
                "benchmark_score": report.benchmark_score,
            }
        )
        return report
