"""Shared fixtures: isolated settings and an in-memory GitHub repository."""

import itertools
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from pr_assistant.config import get_settings
from pr_assistant.github_client import get_github_client
from pr_assistant.llm import get_ai_model

ENV_VARS = [
    "GITHUB_TOKEN",
    "GITHUB_WEBHOOK_SECRET",
    "OPENROUTER_API_KEY",
    "OPENROUTER_MODEL",
    "MAX_FILES_TO_ANALYZE",
    "MAX_DIFF_CHARS_PER_FILE",
    "ENVIRONMENT",
    "API_PREFIX",
    "LOGFIRE_TOKEN",
]


def _clear_caches():
    get_settings.cache_clear()
    get_github_client.cache_clear()
    get_ai_model.cache_clear()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Start every test from default settings and fresh client handles."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def configure(monkeypatch):
    """Set environment variables and reload settings."""

    def _configure(**values):
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), str(value))
        get_settings.cache_clear()
        return get_settings()

    return _configure


class FakeComment:
    _ids = itertools.count(1000)

    def __init__(self, body: str):
        self.id = next(self._ids)
        self.body = body

    def edit(self, body: str):
        self.body = body


class FakeIssue:
    """Issue comments and labels held in memory."""

    def __init__(self):
        self.comments: list[FakeComment] = []
        self.labels: list[str] = []
        self.label_error: Exception | None = None

    def get_comments(self):
        return list(self.comments)

    def create_comment(self, body: str) -> FakeComment:
        comment = FakeComment(body)
        self.comments.append(comment)
        return comment

    def add_to_labels(self, *labels: str):
        if self.label_error:
            raise self.label_error
        self.labels.extend(labels)


class FakeRepo:
    def __init__(self):
        self.issue = FakeIssue()
        self.pull = MagicMock()
        self.set_files([])
        self.set_commits([])

    def set_files(self, files):
        self.pull.get_files.return_value.get_page.return_value = files

    def set_commits(self, commits):
        self.pull.get_commits.return_value.get_page.return_value = commits

    def get_pull(self, number):
        return self.pull

    def get_issue(self, number):
        return self.issue


@pytest.fixture
def fake_repo():
    """Patch the GitHub client so every repository resolves to one FakeRepo."""
    repo = FakeRepo()
    github = MagicMock()
    github.get_repo.return_value = repo

    with patch("pr_assistant.github_client.get_github_client", return_value=github):
        repo.github = github
        yield repo


@pytest.fixture
def make_file():
    def _make_file(filename="src/app.py", status="modified", additions=3, deletions=1, patch="@@ -1 +1 @@\n-a\n+b"):
        return SimpleNamespace(
            filename=filename,
            status=status,
            additions=additions,
            deletions=deletions,
            patch=patch,
        )

    return _make_file


@pytest.fixture
def make_commit():
    def _make_commit(sha="0123456789abcdef", message="Fix bug", name="Alice", date=None, author=True):
        commit_author = None
        if author:
            commit_author = SimpleNamespace(
                name=name,
                date=date or datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
            )
        return SimpleNamespace(sha=sha, commit=SimpleNamespace(message=message, author=commit_author))

    return _make_commit


@pytest.fixture
def pr_payload():
    """A pull_request webhook payload as GitHub sends it (trimmed)."""
    return {
        "action": "opened",
        "number": 7,
        "pull_request": {
            "number": 7,
            "title": "Add caching layer",
            "body": "Adds a cache in front of the user lookup.",
            "user": {"login": "octocat"},
            "base": {"ref": "main", "sha": "aaa"},
            "head": {"ref": "feature/cache", "sha": "bbb"},
            "additions": 40,
            "deletions": 2,
            "changed_files": 2,
        },
        "repository": {
            "name": "widgets",
            "full_name": "acme/widgets",
            "owner": {"login": "acme"},
        },
        "sender": {"login": "octocat"},
    }
