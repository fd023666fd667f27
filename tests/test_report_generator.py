"""
Tests for the report generation entry point.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest

from analyzers.models import HealthReport
from forge.errors import NotFound, RateLimitExceeded
from report import generator
from report.generator import HealthReportGenerator, generate_health_report


@pytest.fixture
def mock_miner(make_repo_data, make_commits):
    miner = Mock()
    miner.mine_repository = AsyncMock(
        return_value=make_repo_data(commits=make_commits(["fix: correct bug"] * 30))
    )
    return miner


@pytest.mark.asyncio
async def test_generate_returns_report(mock_miner):
    report = await HealthReportGenerator(mock_miner).generate("octo", "widgets")

    assert isinstance(report, HealthReport)
    assert report.code_quality.score == 70
    assert report.generated_at.tzinfo is not None
    mock_miner.mine_repository.assert_awaited_once_with("octo", "widgets")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        NotFound("octo/widgets"),
        RateLimitExceeded(
            reset_time=datetime(2024, 6, 1, tzinfo=timezone.utc), limit=60
        ),
        ValueError("malformed payload"),
    ],
)
async def test_generate_propagates_failures(mock_miner, error):
    """No partial report: the mining failure reaches the caller unchanged."""
    mock_miner.mine_repository.side_effect = error
    analyzer = Mock()

    with pytest.raises(type(error)) as excinfo:
        await HealthReportGenerator(mock_miner, analyzer).generate("octo", "widgets")

    assert excinfo.value is error
    analyzer.analyze_repository.assert_not_called()


@pytest.mark.asyncio
async def test_generate_health_report_uses_credential(make_repo_data):
    repo_data = make_repo_data()
    with patch.object(generator, "GitHubClient") as client_cls, patch.object(
        generator, "GitHubMiner"
    ) as miner_cls:
        miner_cls.return_value.mine_repository = AsyncMock(return_value=repo_data)

        report = await generate_health_report("octo", "widgets", credential="ghp_abc")

    client_cls.assert_called_once_with(token="ghp_abc")
    miner_cls.assert_called_once_with(client_cls.return_value)
    assert report.repository == repo_data.repository


@pytest.mark.asyncio
async def test_generate_health_report_falls_back_to_settings(make_repo_data):
    with patch.object(generator, "GitHubClient") as client_cls, patch.object(
        generator, "GitHubMiner"
    ) as miner_cls, patch.object(generator, "settings") as settings:
        settings.token = None
        miner_cls.return_value.mine_repository = AsyncMock(
            return_value=make_repo_data()
        )

        await generate_health_report("octo", "widgets")

    client_cls.assert_called_once_with(token=None)


@pytest.mark.asyncio
async def test_generate_health_report_empty_credential_is_public(make_repo_data):
    with patch.object(generator, "GitHubClient") as client_cls, patch.object(
        generator, "GitHubMiner"
    ) as miner_cls, patch.object(generator, "settings") as settings:
        settings.token = "ghp_configured"
        miner_cls.return_value.mine_repository = AsyncMock(
            return_value=make_repo_data()
        )

        await generate_health_report("octo", "widgets", credential="")

    client_cls.assert_called_once_with(token="")


@pytest.mark.asyncio
async def test_generate_health_report_closes_client(make_repo_data):
    with patch.object(generator, "GitHubClient") as client_cls, patch.object(
        generator, "GitHubMiner"
    ) as miner_cls:
        miner_cls.return_value.mine_repository = AsyncMock(
            return_value=make_repo_data()
        )

        await generate_health_report("octo", "widgets", credential="ghp_abc")

    client_cls.return_value.close.assert_called_once_with()


@pytest.mark.asyncio
async def test_generate_health_report_closes_client_on_failure():
    with patch.object(generator, "GitHubClient") as client_cls, patch.object(
        generator, "GitHubMiner"
    ) as miner_cls:
        miner_cls.return_value.mine_repository = AsyncMock(
            side_effect=NotFound("octo/widgets")
        )

        with pytest.raises(NotFound):
            await generate_health_report("octo", "widgets", credential="ghp_abc")

    client_cls.return_value.close.assert_called_once_with()
