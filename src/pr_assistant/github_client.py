"""GitHub REST operations used by the assistant."""

from functools import lru_cache

import logfire
from github import Auth, Github

from pr_assistant.config import get_settings
from pr_assistant.errors import ConfigurationError
from pr_assistant.models import ChangedFile, CommitSummary

# Hidden marker identifying the bot's own comment. Must stay byte-for-byte
# identical so previously posted comments keep being updated in place.
COMMENT_MARKER = "<!-- github-pr-assistant -->"

NO_PATCH_PLACEHOLDER = "(binary or no diff available)"
UNKNOWN_AUTHOR = "Unknown"
PAGE_SIZE = 100


@lru_cache
def get_github_client() -> Github:
    """Get the process-wide GitHub client, creating it on first use."""
    settings = get_settings()

    if not settings.github_token:
        raise ConfigurationError("GITHUB_TOKEN environment variable is not set")

    return Github(auth=Auth.Token(settings.github_token), per_page=PAGE_SIZE)


def _get_repo(owner: str, repo: str):
    return get_github_client().get_repo(f"{owner}/{repo}", lazy=True)


def list_changed_files(owner: str, repo: str, pr_number: int) -> list[ChangedFile]:
    """Fetch the files changed by a PR, bounded by the configured limits.

    Only the first page (100 files) is requested. The list is cut to
    max_files_to_analyze and each patch to max_diff_chars_per_file.
    """
    settings = get_settings()
    gh_pr = _get_repo(owner, repo).get_pull(pr_number)

    files = gh_pr.get_files().get_page(0)[: settings.max_files_to_analyze]

    return [
        ChangedFile(
            filename=f.filename,
            status=f.status,
            additions=f.additions,
            deletions=f.deletions,
            patch=f.patch[: settings.max_diff_chars_per_file] if f.patch else NO_PATCH_PLACEHOLDER,
        )
        for f in files
    ]


def list_commits(owner: str, repo: str, pr_number: int) -> list[CommitSummary]:
    """Fetch the commits on a PR (first page only)."""
    gh_pr = _get_repo(owner, repo).get_pull(pr_number)

    commits = []
    for c in gh_pr.get_commits().get_page(0):
        author = c.commit.author
        commits.append(
            CommitSummary(
                sha=c.sha[:7],
                message=c.commit.message,
                author=(author.name if author else None) or UNKNOWN_AUTHOR,
                date=author.date if author else None,
            )
        )

    return commits


def upsert_comment(owner: str, repo: str, pr_number: int, body: str) -> None:
    """Create the bot comment on a PR, or update it if one already exists."""
    prefix = f"[comment] {owner}/{repo}#{pr_number}"
    gh_issue = _get_repo(owner, repo).get_issue(pr_number)
    full_body = f"{COMMENT_MARKER}\n{body}"

    existing = next(
        (c for c in gh_issue.get_comments() if c.body and COMMENT_MARKER in c.body),
        None,
    )

    if existing is not None:
        existing.edit(full_body)
        logfire.info(f"{prefix} - updated existing bot comment {existing.id}")
    else:
        created = gh_issue.create_comment(full_body)
        logfire.info(f"{prefix} - created bot comment {created.id}")


def apply_labels(owner: str, repo: str, pr_number: int, labels: list[str]) -> bool:
    """Add labels to a PR. Failures are logged and ignored."""
    if not labels:
        return False

    prefix = f"[labels] {owner}/{repo}#{pr_number}"
    try:
        gh_issue = _get_repo(owner, repo).get_issue(pr_number)
        gh_issue.add_to_labels(*labels)
    except Exception as e:
        logfire.warn(f"{prefix} - could not apply labels (they may not exist in the repo): {e}")
        return False

    logfire.info(f"{prefix} - applied {', '.join(labels)}")
    return True
