import pytest

from analyzers.plugins.category_analyzer import ChangeCategoryAnalyzerPlugin


@pytest.fixture
def classifier():
    return ChangeCategoryAnalyzerPlugin()


@pytest.mark.parametrize(
    "message, expected",
    [
        ('Revert "feat: add cache"', True),
        ("Rollback schema migration", True),
        ("roll back the config change", True),
        ("hotfix: restore login", True),
        ("fix: null check", False),
        ("feat: add cache", False),
    ],
)
def test_failure_commits(classifier, message, expected):
    assert classifier.is_failure_commit(message) is expected


@pytest.mark.parametrize(
    "message, expected",
    [
        ("fix: null check", True),
        ("HOTFIX for payments", True),
        ("patch CVE in parser", True),
        ("urgent: bump cert", True),
        ("Critical path tuning", True),
        ("docs: update readme", False),
        ("", False),
    ],
)
def test_fix_commits(classifier, message, expected):
    assert classifier.is_fix_commit(message) is expected


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Fix crash on startup", True),
        ("Bug: wrong total", True),
        ("Add settings page", False),
        ("urgent: bump cert", False),
    ],
)
def test_fix_pull_requests(classifier, title, expected):
    assert classifier.is_fix_pull_request(title) is expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Deploy to production", True),
        ("release", True),
        ("Production smoke", True),
        ("CI", False),
        (None, False),
    ],
)
def test_deployment_runs(classifier, name, expected):
    assert classifier.is_deployment_run(name) is expected
