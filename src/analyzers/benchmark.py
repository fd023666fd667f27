"""
Industry Benchmark Lookup.

Reference scores a repository's overall score is compared against, keyed by
primary language and adjusted by repository size. The table values are
placeholders to be replaced by a real benchmark dataset; they are fixed so a
report is reproducible.
"""

from typing import Dict, Optional

from config import settings
from forge.models import RepositorySnapshot

LANGUAGE_BENCHMARKS: Dict[str, int] = {
    "Go": 70,
    "Rust": 72,
    "TypeScript": 68,
    "Kotlin": 67,
    "Python": 66,
    "C#": 65,
    "Java": 64,
    "Swift": 64,
    "Ruby": 63,
    "JavaScript": 62,
    "C++": 60,
    "C": 58,
    "PHP": 57,
}

# (upper bound in KB, adjustment); larger codebases score lower on average
SIZE_ADJUSTMENTS = (
    (1_000, 3),
    (10_000, 0),
    (100_000, -3),
)
LARGEST_SIZE_ADJUSTMENT = -6


def size_adjustment(size_kb: int) -> int:
    for upper_bound, adjustment in SIZE_ADJUSTMENTS:
        if size_kb < upper_bound:
            return adjustment
    return LARGEST_SIZE_ADJUSTMENT


def benchmark_score(
    repository: RepositorySnapshot,
    table: Optional[Dict[str, int]] = None,
    default: Optional[int] = None,
) -> int:
    """
    Benchmark score for a repository in [0, 100].

    Args:
        repository (RepositorySnapshot): Repository metadata
        table (Optional[Dict[str, int]]): Language to base score override
        default (Optional[int]): Base score for languages missing from the table

    Returns:
        int: Benchmark score
    """
    table = LANGUAGE_BENCHMARKS if table is None else table
    default = settings.benchmark_default if default is None else default

    base = table.get(repository.language or "", default)
    return max(0, min(100, base + size_adjustment(repository.size)))
