"""
Deployment Performance Estimation.

Approximates the four DORA metrics from releases, CI workflow runs, merged pull
requests and commit history:
- deployment frequency, from releases and successful deploy runs per week
- lead time, from merge to the next release
- change failure rate, from failed deploy runs or revert-style commits
- mean time to recover, from the spacing of fix commits

Each metric falls back to a coarser signal when its preferred data is missing.
Thresholds and fallbacks are tunable heuristics.
"""

from bisect import bisect_left
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pandas as pd

from config import settings, logger
from forge.models import PullRequestRecord, WorkflowRunRecord
from miners.models import RepositoryData
from analyzers.models import DeploymentMetrics
from analyzers.plugins.category_analyzer import ChangeCategoryAnalyzerPlugin

SECONDS_PER_HOUR = 3600
SECONDS_PER_WEEK = 7 * 24 * SECONDS_PER_HOUR

LEAD_TIME_SAMPLE_SIZE = 10
MAX_LEAD_TIME_HOURS = 30 * 24
MIN_RECOVERY_GAP_HOURS = 1
MAX_RECOVERY_GAP_HOURS = 7 * 24


def per_week(timestamps: Sequence[datetime], now: datetime) -> float:
    """
    Event rate over the span from the oldest event to now.

    The span is at least one week so a burst of recent events is not
    extrapolated into an absurd weekly rate.
    """
    if not timestamps:
        return 0.0
    span = (now - min(timestamps)).total_seconds() / SECONDS_PER_WEEK
    return len(timestamps) / max(span, 1.0)


def gap_hours(timestamps: Sequence[datetime]) -> pd.Series:
    """Hours between consecutive timestamps in chronological order."""
    epochs = pd.Series(sorted(ts.timestamp() for ts in timestamps), dtype="float64")
    return epochs.diff().dropna() / SECONDS_PER_HOUR


class DeploymentAnalyzer:
    """Estimates deployment performance from mined repository data."""

    def __init__(
        self,
        classifier: Optional[ChangeCategoryAnalyzerPlugin] = None,
        default_lead_time: Optional[float] = None,
        default_recovery_time: Optional[float] = None,
    ):
        """
        Args:
            classifier (Optional[ChangeCategoryAnalyzerPlugin]): Keyword classifier
            default_lead_time (Optional[float]): Fallback lead time in hours
            default_recovery_time (Optional[float]): Fallback recovery time in hours
        """
        self.classifier = classifier or ChangeCategoryAnalyzerPlugin()
        self.default_lead_time = (
            settings.default_lead_time_hours
            if default_lead_time is None
            else default_lead_time
        )
        self.default_recovery_time = (
            settings.default_recovery_hours
            if default_recovery_time is None
            else default_recovery_time
        )

    def _deployment_runs(
        self, runs: Sequence[WorkflowRunRecord]
    ) -> List[WorkflowRunRecord]:
        return [run for run in runs if self.classifier.is_deployment_run(run.name)]

    def _frequency(self, repo_data: RepositoryData, now: datetime) -> float:
        releases = [r.published_at for r in repo_data.releases if r.published_at]
        deployments = [
            run.created_at
            for run in self._deployment_runs(repo_data.workflow_runs)
            if run.conclusion == "success"
        ]
        return max(per_week(releases, now), per_week(deployments, now))

    def _lead_time(self, repo_data: RepositoryData) -> float:
        release_times = sorted(
            r.published_at
            for r in repo_data.releases
            if r.published_at and not r.draft
        )
        merged: List[PullRequestRecord] = sorted(
            (pr for pr in repo_data.pull_requests if pr.merged_at),
            key=lambda pr: pr.merged_at,
            reverse=True,
        )[:LEAD_TIME_SAMPLE_SIZE]

        samples = []
        for pr in merged:
            index = bisect_left(release_times, pr.merged_at)
            if index == len(release_times):
                continue
            delta = release_times[index] - pr.merged_at
            hours = delta.total_seconds() / SECONDS_PER_HOUR
            if hours <= MAX_LEAD_TIME_HOURS:
                samples.append(hours)
        if samples:
            return sum(samples) / len(samples)

        release_gaps = gap_hours(release_times)
        if not release_gaps.empty:
            return float(release_gaps.mean()) / 2

        commit_gaps = gap_hours(
            [c.authored_at for c in repo_data.commits if c.authored_at]
        )
        if not commit_gaps.empty:
            return float(commit_gaps.mean())

        return self.default_lead_time

    def _change_failure_rate(self, repo_data: RepositoryData) -> float:
        finished = [
            run for run in self._deployment_runs(repo_data.workflow_runs)
            if run.conclusion
        ]
        if finished:
            failures = [run for run in finished if run.conclusion == "failure"]
            return len(failures) * 100 / len(finished)

        if repo_data.commits:
            failures = [
                c for c in repo_data.commits
                if self.classifier.is_failure_commit(c.message)
            ]
            return len(failures) * 100 / len(repo_data.commits)

        return 0.0

    def _recovery_time(self, repo_data: RepositoryData) -> float:
        fixes = [
            c.authored_at
            for c in repo_data.commits
            if c.authored_at and self.classifier.is_fix_commit(c.message)
        ]
        gaps = gap_hours(fixes)
        gaps = gaps[(gaps >= MIN_RECOVERY_GAP_HOURS) & (gaps <= MAX_RECOVERY_GAP_HOURS)]
        if not gaps.empty:
            return float(gaps.mean())

        resolutions = [
            (pr.merged_at - pr.created_at).total_seconds() / SECONDS_PER_HOUR
            for pr in repo_data.pull_requests
            if pr.merged_at and self.classifier.is_fix_pull_request(pr.title)
        ]
        if resolutions:
            return sum(resolutions) / len(resolutions)

        return self.default_recovery_time

    def analyze(
        self, repo_data: RepositoryData, now: Optional[datetime] = None
    ) -> DeploymentMetrics:
        """
        Estimate deployment metrics.

        Args:
            repo_data (RepositoryData): Mined repository data
            now (Optional[datetime]): Reference time for rate calculations

        Returns:
            DeploymentMetrics: Metrics, score and recommendations
        """
        now = now or datetime.now(timezone.utc)

        frequency = round(self._frequency(repo_data, now), 2)
        lead_time = round(max(self._lead_time(repo_data), 0.0), 2)
        failure_rate = round(self._change_failure_rate(repo_data), 2)
        recovery = round(max(self._recovery_time(repo_data), 0.0), 2)

        score = int(
            min(frequency * 10, 30)
            + max(0, 30 - lead_time / 2)
            + max(0, 25 - failure_rate)
            + max(0, 15 - recovery / 2)
        )

        logger.debug(
            {
                "message": "Deployment metrics estimated",
                "repository": repo_data.repository_name,
                "frequency": frequency,
                "lead_time": lead_time,
                "change_failure_rate": failure_rate,
                "mean_time_to_recover": recovery,
                "score": score,
            }
        )
        return DeploymentMetrics(
            frequency=frequency,
            lead_time=lead_time,
            change_failure_rate=failure_rate,
            mean_time_to_recover=recovery,
            score=score,
            recommendations=self._recommendations(
                frequency, lead_time, failure_rate, recovery
            ),
        )

    def _recommendations(
        self,
        frequency: float,
        lead_time: float,
        failure_rate: float,
        recovery: float,
    ) -> List[str]:
        recommendations = []

        if frequency < 1:
            recommendations.append(
                "Increase deployment frequency by implementing continuous delivery practices."
            )
        if lead_time > 24:
            recommendations.append(
                "Reduce lead time by streamlining your CI/CD pipeline and approval processes."
            )
        if failure_rate > 10:
            recommendations.append(
                "Reduce change failure rate by implementing more comprehensive pre-deployment testing."
            )
        if recovery > 12:
            recommendations.append(
                "Improve mean time to recovery by implementing automated rollback mechanisms."
            )

        if len(recommendations) < 2:
            recommendations.append(
                "Implement feature flags to safely deploy and test new features."
            )
            recommendations.append(
                "Adopt infrastructure as code to make deployments more reliable."
            )

        return recommendations
