"""
Repository Mining Data Models.

Defines the bundle of forge data collected for one report run.
Uses Pydantic for validation; the bundle is immutable once mined.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from forge.models import (
    CommitRecord,
    DirectoryEntry,
    IssueRecord,
    PullRequestRecord,
    ReleaseRecord,
    RepositorySnapshot,
    WorkflowRunRecord,
)

PACKAGE_JSON = "package.json"
WORKFLOWS_DIR = ".github/workflows"

# Dependency manifests in detection order; only the first one present counts
MANIFEST_FILES = (
    "package.json",
    "requirements.txt",
    "Gemfile",
    "composer.json",
    "pom.xml",
    "build.gradle",
    "Cargo.toml",
)


class RepositoryData(BaseModel):
    """Container for all mined repository data."""

    model_config = ConfigDict(frozen=True)

    repository: RepositorySnapshot
    collection_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    commits: List[CommitRecord] = []
    languages: Dict[str, int] = {}
    pull_requests: List[PullRequestRecord] = []
    issues: List[IssueRecord] = []
    releases: List[ReleaseRecord] = []
    workflow_runs: List[WorkflowRunRecord] = []
    root_entries: List[DirectoryEntry] = []
    workflow_files: List[DirectoryEntry] = []
    files: Dict[str, str] = {}  # path -> content, only for files that exist

    @property
    def repository_name(self) -> str:
        return self.repository.full_name

    def file(self, path: str) -> Optional[str]:
        """Content of a probed file, or None when it was absent."""
        return self.files.get(path)

    @property
    def manifest(self) -> Optional[str]:
        """Name of the first dependency manifest present at the root."""
        names = {entry.name for entry in self.root_entries if entry.type == "file"}
        return next((name for name in MANIFEST_FILES if name in names), None)
