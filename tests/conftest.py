"""
Shared fixtures: record factories and a reference clock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from forge.models import (
    CommitRecord,
    DirectoryEntry,
    IssueRecord,
    PullRequestRecord,
    ReleaseRecord,
    RepositorySnapshot,
    WorkflowRunRecord,
)
from miners.models import RepositoryData


@pytest.fixture
def now():
    """Fixed reference time for age and rate calculations."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_repository(now):
    def _make(size=1000, age_days=400, language="TypeScript", **fields):
        return RepositorySnapshot(
            owner_login=fields.pop("owner_login", "octo"),
            avatar_url="https://avatars.example/octo.png",
            name=fields.pop("name", "widgets"),
            full_name=fields.pop("full_name", "octo/widgets"),
            description="Widget factory",
            size=size,
            language=language,
            created_at=now - timedelta(days=age_days),
            updated_at=now,
            pushed_at=now,
            **fields,
        )

    return _make


@pytest.fixture
def make_commits(now):
    def _make(messages, spacing_hours=24.0, start=None):
        """Commits newest first, spaced evenly back in time."""
        start = start or now
        return [
            CommitRecord(
                sha=f"{index:040x}",
                author_name="Octo Cat",
                author_email="octo@example.com",
                authored_at=start - timedelta(hours=spacing_hours * index),
                message=message,
            )
            for index, message in enumerate(messages)
        ]

    return _make


@pytest.fixture
def make_pull_request(now):
    def _make(
        number, merged_hours_ago=None, open_hours=24.0, title="Add widget", **fields
    ):
        merged_at = (
            now - timedelta(hours=merged_hours_ago)
            if merged_hours_ago is not None
            else None
        )
        created_at = (merged_at or now) - timedelta(hours=open_hours)
        return PullRequestRecord(
            number=number,
            title=title,
            state="closed" if merged_at else "open",
            created_at=created_at,
            merged_at=merged_at,
            closed_at=merged_at,
            **fields,
        )

    return _make


@pytest.fixture
def make_release(now):
    def _make(hours_ago, tag="v1.0.0"):
        return ReleaseRecord(tag_name=tag, published_at=now - timedelta(hours=hours_ago))

    return _make


@pytest.fixture
def make_run(now):
    def _make(name, conclusion="success", hours_ago=1.0, run_id=1):
        return WorkflowRunRecord(
            id=run_id,
            name=name,
            status="completed",
            conclusion=conclusion,
            event="push",
            created_at=now - timedelta(hours=hours_ago),
        )

    return _make


@pytest.fixture
def make_entry():
    def _make(name, type="file", path=None):
        return DirectoryEntry(name=name, path=path or name, type=type, size=0)

    return _make


@pytest.fixture
def make_issue(now):
    def _make(number, comments=0, is_pull_request=False):
        return IssueRecord(
            number=number,
            title=f"Issue {number}",
            state="open",
            created_at=now - timedelta(days=3),
            comments=comments,
            is_pull_request=is_pull_request,
        )

    return _make


@pytest.fixture
def make_repo_data(make_repository):
    def _make(repository=None, **fields):
        return RepositoryData(repository=repository or make_repository(), **fields)

    return _make
