"""
Tests for technical debt estimation and its sub-metric heuristics.
"""

import json

import pytest

from analyzers.technical_debt import (
    TechnicalDebtAnalyzer,
    count_dependencies,
    estimate_duplication,
    estimate_outdated_dependencies,
    estimate_test_coverage,
    repository_age_days,
    review_engagement,
)


@pytest.fixture
def analyzer():
    return TechnicalDebtAnalyzer()


def test_repository_age_rounds_up(make_repository, now):
    repository = make_repository(age_days=400)

    assert repository_age_days(repository.created_at, now) == 400


@pytest.mark.parametrize(
    "age_days, language_count, expected",
    [
        (0, 1, 0),
        (400, 3, 13),  # ~1% per month
        (400, 5, 17),  # + 2% per language beyond the third
        (3650, 3, 25),  # age share capped
        (3650, 20, 40),  # overall cap
    ],
)
def test_duplication(age_days, language_count, expected):
    languages = {f"Lang{i}": 100 for i in range(language_count)}

    assert estimate_duplication(age_days, languages) == expected


def test_coverage_signals_accumulate(make_entry):
    root = [
        make_entry("tests", type="dir"),
        make_entry("jest.config.js"),
        make_entry("src", type="dir"),
        make_entry("package.json"),
    ]
    package_json = json.dumps(
        {"scripts": {"test": "jest --coverage"}, "devDependencies": {"jest": "^29.0.0"}}
    )
    workflows = [make_entry("ci.yml", path=".github/workflows/ci.yml")]

    assert estimate_test_coverage(root, package_json, workflows) == 80


def test_coverage_floor_without_signals(make_entry):
    root = [make_entry("src", type="dir"), make_entry("README.md")]

    assert estimate_test_coverage(root) == 5


def test_coverage_cap(make_entry):
    root = [
        make_entry(name, type="dir")
        for name in ("test", "tests", "spec", "__tests__", "e2e", "cypress")
    ]
    workflows = [make_entry("ci.yml")]

    assert estimate_test_coverage(root, None, workflows) == 95


def test_npm_placeholder_script_is_not_a_test_signal():
    package_json = json.dumps(
        {
            "scripts": {"test": 'echo "Error: no test specified" && exit 1'},
            "dependencies": {"express": "^4.0.0"},
        }
    )

    assert estimate_test_coverage([], package_json) == 5


def test_scoped_test_frameworks_count():
    package_json = json.dumps({"devDependencies": {"@testing-library/react": "^14"}})

    assert estimate_test_coverage([], package_json) == 20


def test_unreadable_package_json_is_ignored():
    assert estimate_test_coverage([], "{not json") == 5


@pytest.mark.parametrize(
    "manifest, content, expected",
    [
        (
            "package.json",
            json.dumps(
                {
                    "dependencies": {"react": "^18", "next": "^14"},
                    "devDependencies": {"jest": "^29"},
                }
            ),
            3,
        ),
        (
            "requirements.txt",
            "# core\nrequests==2.31\n\npydantic>=2\n-r dev.txt\npandas\n",
            3,
        ),
        (
            "Gemfile",
            "source 'https://rubygems.org'\ngem 'rails'\ngem 'puma'\n",
            2,
        ),
        (
            "composer.json",
            json.dumps(
                {
                    "require": {"php": ">=8.1", "ext-json": "*", "laravel/framework": "^10"},
                    "require-dev": {"phpunit/phpunit": "^10"},
                }
            ),
            2,
        ),
        (
            "pom.xml",
            "<dependencies><dependency>a</dependency><dependency>b</dependency></dependencies>",
            2,
        ),
        (
            "build.gradle",
            "dependencies {\n    implementation 'a:b:1'\n    testImplementation 'c:d:2'\n}\n",
            2,
        ),
        (
            "Cargo.toml",
            '[package]\nname = "widgets"\n\n[dependencies]\nserde = "1"\ntokio = { version = "1" }\n\n'
            '[dev-dependencies]\nproptest = "1"\n',
            3,
        ),
    ],
)
def test_count_dependencies(manifest, content, expected):
    assert count_dependencies(manifest, content) == expected


def test_outdated_dependencies_scale_and_cap():
    assert estimate_outdated_dependencies(50, 400) == 6
    assert estimate_outdated_dependencies(50, 20) == 0
    assert estimate_outdated_dependencies(300, 400) == 20


def test_review_engagement_uses_issue_comments(make_pull_request, make_issue):
    pull_requests = [
        make_pull_request(1, comments=2),
        make_pull_request(2),
        make_pull_request(3, comments=0, review_comments=3),
        make_pull_request(4, comments=0, review_comments=0),
    ]
    issues = [make_issue(2, comments=1, is_pull_request=True), make_issue(4, comments=5)]

    assert review_engagement(pull_requests, issues) == 0.75
    assert review_engagement([], issues) is None


def test_debt_score_without_pull_requests(analyzer, make_repo_data, make_commits, now):
    repo_data = make_repo_data(
        commits=make_commits(["fix: correct bug"] * 30),
        languages={"TypeScript": 1000},
    )

    debt = analyzer.analyze(repo_data, now)

    assert debt.metrics.complexity_score == 0.3
    assert debt.metrics.duplications == 13
    assert debt.metrics.test_coverage == 5
    assert debt.metrics.outdated_dependencies == 0
    # 100 - 25*0.3 - 0.4*13 - 0.25*95 - 0
    assert debt.score == 63
    assert "Increase test coverage to at least 80% for critical code paths." in (
        debt.recommendations
    )


def test_debt_blends_review_engagement(
    analyzer, make_repo_data, make_commits, make_pull_request, now
):
    repo_data = make_repo_data(
        commits=make_commits(["fix: correct bug"] * 30),
        pull_requests=[
            make_pull_request(1, comments=1),
            make_pull_request(2, comments=0),
            make_pull_request(3, comments=0),
            make_pull_request(4, comments=0),
        ],
    )

    debt = analyzer.analyze(repo_data, now)

    # 0.6 * 0.3 + 0.4 * 0.75
    assert debt.metrics.complexity_score == 0.48


def test_debt_uses_first_manifest_only(
    analyzer, make_repo_data, make_entry, make_repository, now
):
    requirements = "\n".join(f"package{i}" for i in range(200))
    repo_data = make_repo_data(
        repository=make_repository(age_days=400),
        root_entries=[make_entry("requirements.txt"), make_entry("Cargo.toml")],
        files={"requirements.txt": requirements},
    )

    debt = analyzer.analyze(repo_data, now)

    assert debt.metrics.outdated_dependencies == 20


def test_debt_score_is_clamped(
    analyzer,
    make_repo_data,
    make_repository,
    make_commits,
    make_pull_request,
    make_entry,
    now,
):
    repo_data = make_repo_data(
        repository=make_repository(age_days=3650),
        commits=make_commits([""] * 30),
        languages={f"Lang{i}": 1 for i in range(10)},
        pull_requests=[make_pull_request(i, comments=0) for i in range(1, 6)],
        root_entries=[make_entry("requirements.txt")],
        files={"requirements.txt": "\n".join(f"pkg{i}" for i in range(200))},
    )

    debt = analyzer.analyze(repo_data, now)

    assert debt.score == 0
    assert debt.metrics.complexity_score == 1.0
    assert debt.metrics.duplications == 39
    assert debt.metrics.outdated_dependencies == 20
    assert len(debt.recommendations) == 4
