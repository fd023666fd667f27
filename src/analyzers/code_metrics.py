"""
Code Volume Estimation.

Order-of-magnitude line and file counts derived from the repository size the
forge reports. Nothing is cloned or parsed; every ratio below is a tunable
heuristic, not a measured constant.
"""

from typing import Dict

from forge.models import RepositorySnapshot
from analyzers.models import CodeMetrics

LINES_PER_KB = 50
CODE_PERCENT = 75
COMMENT_PERCENT = 15
KB_PER_FILE = 10


class CodeMetricsAnalyzer:
    """Estimates code volume from repository size and language bytes."""

    def analyze(
        self, repository: RepositorySnapshot, languages: Dict[str, int]
    ) -> CodeMetrics:
        """
        Estimate line and file counts.

        Args:
            repository (RepositorySnapshot): Repository metadata (size in KB)
            languages (Dict[str, int]): Bytes per language

        Returns:
            CodeMetrics: Estimated code volume
        """
        total_lines = repository.size * LINES_PER_KB
        code_lines = total_lines * CODE_PERCENT // 100
        comment_lines = total_lines * COMMENT_PERCENT // 100

        return CodeMetrics(
            total_lines=total_lines,
            code_lines=code_lines,
            comment_lines=comment_lines,
            blank_lines=total_lines - code_lines - comment_lines,
            files=repository.size // KB_PER_FILE,
            languages=dict(languages),
        )
