"""
Forge Record Models.

Immutable value objects built from GitHub REST payloads. Uses Pydantic for
validation; a payload missing a required field fails validation instead of
silently producing a partial record.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ForgeRecord(BaseModel):
    """Base for all forge records: frozen, unknown keys ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class RepositorySnapshot(ForgeRecord):
    """Repository metadata."""

    owner_login: str
    avatar_url: Optional[str] = None
    name: str
    full_name: str
    description: Optional[str] = None
    html_url: Optional[str] = None
    size: int  # KB
    language: Optional[str] = None
    default_branch: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    pushed_at: Optional[datetime] = None


class CommitRecord(ForgeRecord):
    """A single commit, as listed by the commits endpoint."""

    sha: str
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    authored_at: Optional[datetime] = None
    message: str = ""


class PullRequestRecord(ForgeRecord):
    """Pull request summary. Comment counts are absent from list payloads."""

    number: int
    title: str = ""
    state: str
    created_at: datetime
    merged_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    comments: Optional[int] = None
    review_comments: Optional[int] = None


class IssueRecord(ForgeRecord):
    """Issue summary. The issues listing also returns pull requests."""

    number: int
    title: str = ""
    state: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    labels: List[str] = []
    comments: int = 0
    is_pull_request: bool = False


class ReleaseRecord(ForgeRecord):
    """Published (or draft) release."""

    tag_name: str
    name: Optional[str] = None
    published_at: Optional[datetime] = None
    draft: bool = False
    prerelease: bool = False


class WorkflowRunRecord(ForgeRecord):
    """CI workflow run."""

    id: int
    name: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    event: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ContributorRecord(ForgeRecord):
    """Repository contributor and their commit count."""

    login: Optional[str] = None
    contributions: int = 0


class DirectoryEntry(ForgeRecord):
    """One entry of a directory listing."""

    name: str
    path: str
    type: str  # "file", "dir", "symlink" or "submodule"
    size: int = 0
