"""
Health Report Data Models.

Defines the value objects produced by the estimators and the final report.
Uses Pydantic for validation; fields serialize with camelCase aliases.
"""

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Mapping, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from forge.models import RepositorySnapshot

# Read-only containers; a report never changes after construction
LanguageBytes = Annotated[
    Mapping[str, int],
    AfterValidator(MappingProxyType),
    PlainSerializer(dict, return_type=Dict[str, int]),
]
Recommendations = Tuple[str, ...]


class ReportModel(BaseModel):
    """Base for report sections: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class CodeMetrics(ReportModel):
    """Size estimates derived from repository size. Proxies, not measurements."""

    total_lines: int = Field(ge=0)
    code_lines: int = Field(ge=0)
    comment_lines: int = Field(ge=0)
    blank_lines: int = Field(ge=0)
    files: int = Field(ge=0)
    languages: LanguageBytes

    def top_languages(self, limit: int = 5) -> List[Tuple[str, int]]:
        """Languages by byte count, largest first, with rounded percentages."""
        total = sum(self.languages.values())
        if total == 0:
            return []
        ranked = sorted(self.languages.items(), key=lambda item: item[1], reverse=True)
        return [(name, round(size * 100 / total)) for name, size in ranked[:limit]]


class IssueCounts(ReportModel):
    critical: int = Field(ge=0)
    high: int = Field(ge=0)
    medium: int = Field(ge=0)
    low: int = Field(ge=0)


class CodeQuality(ReportModel):
    """Commit-history based quality estimate."""

    score: int = Field(ge=0, le=100)
    issues: IssueCounts
    recommendations: Recommendations


class DebtMetrics(ReportModel):
    complexity_score: float = Field(ge=0, le=1)
    duplications: int = Field(ge=0, le=40)
    test_coverage: int = Field(ge=0, le=95)
    outdated_dependencies: int = Field(ge=0, le=20)


class TechnicalDebt(ReportModel):
    score: int = Field(ge=0, le=100)
    metrics: DebtMetrics
    recommendations: Recommendations


class DeploymentMetrics(ReportModel):
    """DORA-style delivery metrics."""

    frequency: float = Field(ge=0)  # deployments per week
    lead_time: float = Field(ge=0)  # hours
    change_failure_rate: float = Field(ge=0, le=100)  # percent
    mean_time_to_recover: float = Field(ge=0)  # hours
    score: int = Field(ge=0, le=100)
    recommendations: Recommendations


class HealthReport(ReportModel):
    """The complete health report for one repository."""

    repository: RepositorySnapshot
    code_metrics: CodeMetrics
    code_quality: CodeQuality
    technical_debt: TechnicalDebt
    deployment_metrics: DeploymentMetrics
    overall_score: int = Field(ge=0, le=100)
    benchmark_score: int = Field(ge=0, le=100)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def above_benchmark(self) -> bool:
        return self.overall_score > self.benchmark_score

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready mapping with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
