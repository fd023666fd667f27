"""
This module contains the keyword classifiers used by the deployment estimator
to tell fixes, reverts and deployments apart.
"""

from typing import Iterable, Optional


class CategoryAnalyzerPlugin:
    """Base class for category analyzer plugins."""

    @staticmethod
    def _contains_any(text: Optional[str], keywords: Iterable[str]) -> bool:
        lowered = (text or "").lower()
        return any(keyword in lowered for keyword in keywords)


class ChangeCategoryAnalyzerPlugin(CategoryAnalyzerPlugin):
    """
    Categorize commits, pull requests and workflow runs by keywords.

    Matching is case-insensitive substring matching, so "hotfix" also counts
    as a fix and "Deploy to production" as a deployment.
    """

    FAILURE_KEYWORDS = ("revert", "rollback", "roll back", "hotfix")
    FIX_COMMIT_KEYWORDS = ("fix", "hotfix", "patch", "urgent", "critical")
    FIX_PR_KEYWORDS = ("fix", "bug", "hotfix", "patch")
    DEPLOY_KEYWORDS = ("deploy", "release", "production")

    def is_failure_commit(self, message: str) -> bool:
        """Commit that undoes or urgently repairs a change."""
        return self._contains_any(message, self.FAILURE_KEYWORDS)

    def is_fix_commit(self, message: str) -> bool:
        return self._contains_any(message, self.FIX_COMMIT_KEYWORDS)

    def is_fix_pull_request(self, title: str) -> bool:
        return self._contains_any(title, self.FIX_PR_KEYWORDS)

    def is_deployment_run(self, name: Optional[str]) -> bool:
        """
        Workflow run that deploys or releases.

        Example:
            "Deploy to production" -> True
            "CI" -> False
        """
        return self._contains_any(name, self.DEPLOY_KEYWORDS)
