"""
Code Quality Estimation.

Scores code quality from commit-message hygiene: longer messages, the
conventional-commit format and explanatory bodies earn points. Issue counts
are projected from the score. All weights are tunable heuristics standing in
for a real static-analysis run.
"""

import re
from typing import List, Optional, Sequence

from config import settings, logger
from forge.models import CommitRecord
from analyzers.models import CodeQuality, IssueCounts

CONVENTIONAL_COMMIT = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|perf|ci|build|revert)(\(.+\))?:"
)

# Points are tenths of a commit's score so sums stay exact
LENGTH_THRESHOLDS = (10, 20, 50)
LENGTH_POINTS = 2
CONVENTIONAL_POINTS = 5
BODY_POINTS = 3
POINTS_PER_COMMIT = 10

NEUTRAL_COMMIT_SCORE = 0.5
CONVENTIONAL_ADVICE_THRESHOLD = 0.6

ISSUE_DIVISORS = {"critical": 25, "high": 20, "medium": 10, "low": 5}


def commit_points(message: str) -> int:
    """Score a single commit message in tenths (0 to 14)."""
    points = sum(LENGTH_POINTS for limit in LENGTH_THRESHOLDS if len(message) > limit)
    if CONVENTIONAL_COMMIT.match(message):
        points += CONVENTIONAL_POINTS
    if "\n\n" in message:
        points += BODY_POINTS
    return points


def _total_points(commits: Sequence[CommitRecord]) -> int:
    return sum(commit_points(commit.message) for commit in commits)


def commit_message_score(commits: Sequence[CommitRecord]) -> float:
    """
    Average commit message quality in [0, 1].

    Returns a neutral 0.5 when there are no commits to judge.
    """
    if not commits:
        return NEUTRAL_COMMIT_SCORE
    return min(_total_points(commits) / (POINTS_PER_COMMIT * len(commits)), 1.0)


class CodeQualityAnalyzer:
    """Estimates code quality from recent commit history."""

    def __init__(self, sample_size: Optional[int] = None):
        """
        Args:
            sample_size (Optional[int]): Number of most recent commits to scan.
        """
        self.sample_size = sample_size or settings.commit_sample_size

    def analyze(self, commits: Sequence[CommitRecord]) -> CodeQuality:
        """
        Score code quality.

        Args:
            commits (Sequence[CommitRecord]): Commits, newest first

        Returns:
            CodeQuality: Score, projected issue counts and recommendations
        """
        sample = list(commits[: self.sample_size])
        commit_score = commit_message_score(sample)

        if sample:
            # Integer form of floor(100 * commit_score)
            score = min(_total_points(sample) * 10 // len(sample), 100)
        else:
            score = int(NEUTRAL_COMMIT_SCORE * 100)

        issues = IssueCounts(
            **{
                severity: (100 - score) // divisor
                for severity, divisor in ISSUE_DIVISORS.items()
            }
        )

        logger.debug(
            {
                "message": "Code quality estimated",
                "commits": len(sample),
                "commit_score": round(commit_score, 3),
                "score": score,
            }
        )
        return CodeQuality(
            score=score,
            issues=issues,
            recommendations=self._recommendations(issues, commit_score),
        )

    def _recommendations(self, issues: IssueCounts, commit_score: float) -> List[str]:
        recommendations = []

        if issues.critical > 0:
            recommendations.append(
                "Address critical security vulnerabilities in your codebase."
            )
        if issues.high > 0:
            recommendations.append(
                "Fix high-priority code quality issues to improve maintainability."
            )
        if issues.medium > 3:
            recommendations.append(
                "Implement a code quality scanning tool in your CI/CD pipeline."
            )
        if commit_score < CONVENTIONAL_ADVICE_THRESHOLD:
            recommendations.append(
                "Improve commit message quality by adopting conventional commit format."
            )

        if len(recommendations) < 2:
            recommendations.append(
                "Implement automated code reviews to catch issues early."
            )
            recommendations.append(
                "Add code quality gates to your pull request workflow."
            )

        return recommendations
