"""
Technical Debt Estimation.

Combines four cheap signals into a debt score:
- complexity, from commit hygiene and review engagement
- duplication, growing with repository age and language sprawl
- test coverage, guessed from test-related files at the repository root
- outdated dependencies, proportional to manifest size and repository age

None of these are measured. The constants are tunable heuristics and the
results are estimates, not ground truth.
"""

import json
import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from config import logger
from forge.models import DirectoryEntry, IssueRecord, PullRequestRecord
from miners.models import PACKAGE_JSON, RepositoryData
from analyzers.code_quality import commit_message_score
from analyzers.models import DebtMetrics, TechnicalDebt

COMMIT_COMPLEXITY_WEIGHT = 0.6
REVIEW_COMPLEXITY_WEIGHT = 0.4
REVIEW_SAMPLE_SIZE = 30

DAYS_PER_MONTH = 30
DUPLICATION_PER_MONTH = 1
MAX_AGE_DUPLICATION = 25
BASELINE_LANGUAGES = 3
DUPLICATION_PER_EXTRA_LANGUAGE = 2
MAX_DUPLICATION = 40

TEST_DIR_NAMES = {
    "test",
    "tests",
    "__tests__",
    "spec",
    "specs",
    "e2e",
    "cypress",
    "testing",
}
TEST_CONFIG_PREFIXES = (
    "jest.config",
    "vitest.config",
    "karma.conf",
    "cypress.config",
    "playwright.config",
    "pytest.ini",
    "conftest.py",
    "tox.ini",
    ".mocharc",
    "phpunit.xml",
)
TEST_FRAMEWORKS = (
    "jest",
    "mocha",
    "vitest",
    "cypress",
    "playwright",
    "karma",
    "jasmine",
    "ava",
    "@testing-library/",
    "@playwright/",
)
NPM_PLACEHOLDER_TEST = "no test specified"
PATH_SIGNAL_COVERAGE = 15
MANIFEST_SIGNAL_COVERAGE = 20
CI_SIGNAL_COVERAGE = 10
MAX_COVERAGE = 95
MIN_COVERAGE = 5

OUTDATED_RATE_PER_MONTH = 0.01
MAX_OUTDATED = 20

GRADLE_DEPENDENCY = re.compile(
    r"^\s*(implementation|api|compile|compileOnly|runtimeOnly|"
    r"testImplementation|testCompile|testRuntimeOnly|annotationProcessor)\b",
    re.MULTILINE,
)
GEM_DEPENDENCY = re.compile(r"^\s*gem\s", re.MULTILINE)
CARGO_DEPENDENCY_SECTION = re.compile(
    r"^\[(dev-|build-)?dependencies\]$|^\[target\..*dependencies\]$"
)
CARGO_ENTRY = re.compile(r"^[A-Za-z0-9_-]+\s*=")


def repository_age_days(created_at: datetime, now: datetime) -> int:
    """Whole days since creation, rounded up."""
    return max(0, math.ceil((now - created_at).total_seconds() / 86400))


def review_engagement(
    pull_requests: Sequence[PullRequestRecord],
    issues: Sequence[IssueRecord] = (),
) -> Optional[float]:
    """
    Fraction of sampled pull requests that received any comment.

    List payloads carry no comment counts, so the comment count of the issue
    with the same number stands in when the pull request lacks one.
    Returns None when there is nothing to sample.
    """
    sample = list(pull_requests[:REVIEW_SAMPLE_SIZE])
    if not sample:
        return None

    issue_comments = {
        issue.number: issue.comments for issue in issues if issue.is_pull_request
    }
    engaged = 0
    for pr in sample:
        comments = pr.comments
        if comments is None:
            comments = issue_comments.get(pr.number, 0)
        if comments + (pr.review_comments or 0) > 0:
            engaged += 1
    return engaged / len(sample)


def estimate_duplication(age_days: int, languages: Dict[str, int]) -> int:
    months = age_days // DAYS_PER_MONTH
    age_share = min(months * DUPLICATION_PER_MONTH, MAX_AGE_DUPLICATION)
    extra_languages = max(0, len(languages) - BASELINE_LANGUAGES)
    penalty = extra_languages * DUPLICATION_PER_EXTRA_LANGUAGE
    return min(age_share + penalty, MAX_DUPLICATION)


def _load_json(content: Optional[str]) -> Dict:
    if not content:
        return {}
    try:
        data = json.loads(content)
    except ValueError:
        logger.debug({"message": "Unreadable JSON manifest ignored"})
        return {}
    return data if isinstance(data, dict) else {}


def _is_test_path(name: str) -> bool:
    lowered = name.lower()
    return lowered in TEST_DIR_NAMES or lowered.startswith(TEST_CONFIG_PREFIXES)


def _is_test_framework(package: str) -> bool:
    for framework in TEST_FRAMEWORKS:
        if framework.endswith("/"):
            if package.startswith(framework):
                return True
        elif package == framework or package.startswith(framework + "-"):
            return True
    return False


def estimate_test_coverage(
    root_entries: Sequence[DirectoryEntry],
    package_json: Optional[str] = None,
    workflow_files: Sequence[DirectoryEntry] = (),
) -> int:
    """
    Guess test coverage from test signatures in the repository layout.

    Args:
        root_entries (Sequence[DirectoryEntry]): Root directory listing
        package_json (Optional[str]): package.json content, if present
        workflow_files (Sequence[DirectoryEntry]): CI workflow files, if any

    Returns:
        int: Coverage percentage in [5, 95]
    """
    coverage = sum(
        PATH_SIGNAL_COVERAGE for entry in root_entries if _is_test_path(entry.name)
    )

    manifest = _load_json(package_json)
    scripts = manifest.get("scripts") or {}
    test_script = scripts.get("test") if isinstance(scripts, dict) else None
    if isinstance(test_script, str) and NPM_PLACEHOLDER_TEST not in test_script:
        coverage += MANIFEST_SIGNAL_COVERAGE

    packages = [
        name
        for key in ("dependencies", "devDependencies")
        if isinstance(manifest.get(key), dict)
        for name in manifest[key]
    ]
    if any(_is_test_framework(name) for name in packages):
        coverage += MANIFEST_SIGNAL_COVERAGE

    if workflow_files:
        coverage += CI_SIGNAL_COVERAGE

    if coverage == 0:
        return MIN_COVERAGE
    return min(coverage, MAX_COVERAGE)


def _count_cargo(content: str) -> int:
    count = 0
    in_section = False
    for raw in content.splitlines():
        line = raw.strip()
        if line.startswith("["):
            in_section = bool(CARGO_DEPENDENCY_SECTION.match(line))
        elif in_section and CARGO_ENTRY.match(line):
            count += 1
    return count


def count_dependencies(manifest: str, content: str) -> int:
    """Rough dependency count for a manifest file. Heuristic per format."""
    if manifest in ("package.json", "composer.json"):
        data = _load_json(content)
        keys = ("dependencies", "devDependencies", "require", "require-dev")
        names = [
            name
            for key in keys
            if isinstance(data.get(key), dict)
            for name in data[key]
        ]
        # composer lists the PHP runtime and extensions as requirements
        return len([n for n in names if n != "php" and not n.startswith("ext-")])
    if manifest == "requirements.txt":
        lines = (line.strip() for line in content.splitlines())
        return len(
            [line for line in lines if line and not line.startswith(("#", "-"))]
        )
    if manifest == "Gemfile":
        return len(GEM_DEPENDENCY.findall(content))
    if manifest == "pom.xml":
        return content.count("<dependency>")
    if manifest == "build.gradle":
        return len(GRADLE_DEPENDENCY.findall(content))
    if manifest == "Cargo.toml":
        return _count_cargo(content)
    return 0


def estimate_outdated_dependencies(dependency_count: int, age_days: int) -> int:
    months = age_days // DAYS_PER_MONTH
    return min(int(dependency_count * months * OUTDATED_RATE_PER_MONTH), MAX_OUTDATED)


class TechnicalDebtAnalyzer:
    """Estimates technical debt from mined repository data."""

    def analyze(
        self, repo_data: RepositoryData, now: Optional[datetime] = None
    ) -> TechnicalDebt:
        """
        Score technical debt.

        Args:
            repo_data (RepositoryData): Mined repository data
            now (Optional[datetime]): Reference time for age calculations

        Returns:
            TechnicalDebt: Score, sub-metrics and recommendations
        """
        now = now or datetime.now(timezone.utc)
        age_days = repository_age_days(repo_data.repository.created_at, now)

        commit_term = 1 - commit_message_score(repo_data.commits)
        engagement = review_engagement(repo_data.pull_requests, repo_data.issues)
        if engagement is None:
            complexity = commit_term
        else:
            complexity = (
                COMMIT_COMPLEXITY_WEIGHT * commit_term
                + REVIEW_COMPLEXITY_WEIGHT * (1 - engagement)
            )
        complexity = round(min(max(complexity, 0.0), 1.0), 2)

        duplications = estimate_duplication(age_days, repo_data.languages)
        test_coverage = estimate_test_coverage(
            repo_data.root_entries,
            repo_data.file(PACKAGE_JSON),
            repo_data.workflow_files,
        )

        manifest = repo_data.manifest
        manifest_content = repo_data.file(manifest) if manifest else None
        dependency_count = (
            count_dependencies(manifest, manifest_content) if manifest_content else 0
        )
        outdated = estimate_outdated_dependencies(dependency_count, age_days)

        raw_score = (
            100
            - 25 * complexity
            - 0.4 * duplications
            - 0.25 * (100 - test_coverage)
            - 3 * outdated
        )
        score = int(min(max(raw_score, 0), 100))

        metrics = DebtMetrics(
            complexity_score=complexity,
            duplications=duplications,
            test_coverage=test_coverage,
            outdated_dependencies=outdated,
        )
        logger.debug(
            {
                "message": "Technical debt estimated",
                "repository": repo_data.repository_name,
                "manifest": manifest,
                "dependencies": dependency_count,
                "score": score,
            }
        )
        return TechnicalDebt(
            score=score,
            metrics=metrics,
            recommendations=self._recommendations(metrics),
        )

    def _recommendations(self, metrics: DebtMetrics) -> List[str]:
        recommendations = []

        if metrics.complexity_score > 0.5:
            recommendations.append(
                "Refactor complex code modules to improve maintainability."
            )
        if metrics.duplications > 15:
            recommendations.append(
                "Reduce code duplication by creating reusable components and utilities."
            )
        if metrics.test_coverage < 60:
            recommendations.append(
                "Increase test coverage to at least 80% for critical code paths."
            )
        if metrics.outdated_dependencies > 3:
            recommendations.append(
                "Update outdated dependencies to reduce security risks and technical debt."
            )

        if len(recommendations) < 2:
            recommendations.append(
                "Implement regular technical debt reviews in your development process."
            )
            recommendations.append(
                "Set up dependency scanning to identify outdated packages."
            )

        return recommendations
