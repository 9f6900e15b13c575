"""Prompt construction and Markdown rendering for PR analysis comments."""

from datetime import datetime, timezone

from pr_assistant.models import AnalysisReport, ChangedFile, CommitSummary, GitHubPullRequest

COMMENT_TITLE = "## 🤖 PR Assistant Analysis"
RAW_EXCERPT_CHARS = 1000

RISK_EMOJI = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
}
UNKNOWN_EMOJI = "⚪"

SYSTEM_PROMPT = """You are an expert senior software engineer and code review assistant embedded as a GitHub bot.
Your job is to analyze a Pull Request and produce a structured, insightful report in Markdown.

You MUST respond with ONLY a single JSON object (no prose before or after it) wrapped in a ```json block.

The JSON must have exactly this shape:
```json
{
  "summary": "string - 2-4 sentence high-level summary of what this PR does",
  "purpose": "string - the WHY behind this PR (feature / bugfix / refactor / docs / chore / perf)",
  "keyChanges": ["string", "string"],
  "commitHighlights": ["string"],
  "productionRisks": [
    {
      "severity": "critical | high | medium | low",
      "area": "string - e.g. 'Database', 'Auth', 'API'",
      "description": "string",
      "recommendation": "string"
    }
  ],
  "codeQuality": {
    "score": "number 1-10",
    "strengths": ["string"],
    "concerns": ["string"]
  },
  "testingNotes": "string - observations about test coverage or missing tests",
  "breakingChanges": ["string"],
  "suggestedReviewers": ["string - describe the type of reviewer needed, not names"],
  "overallRiskLevel": "critical | high | medium | low",
  "labels": ["string - concise GitHub label names like 'risk:high', 'needs-tests', 'breaking-change'"]
}
```

Guidelines:
- Be specific, not generic. Reference actual file names and code patterns from the diff.
- For production risks, think about: DB migrations, auth bypasses, N+1 queries, race conditions, \
secret exposure, breaking API contracts, missing error handling.
- Breaking changes = anything that breaks existing API contracts, DB schema, or configuration.
- Keep each string under 200 characters.
- If a section has nothing to report, use an empty array [] or "None identified."."""


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(
    pr: GitHubPullRequest,
    files: list[ChangedFile],
    commits: list[CommitSummary],
    repo_full_name: str,
) -> str:
    """Describe the PR, its commits and its diffs for the model."""
    files_summary = "\n\n".join(
        f"### File {i}: `{f.filename}` [{f.status}] (+{f.additions}/-{f.deletions})\n"
        f"```diff\n{f.patch}\n```"
        for i, f in enumerate(files, 1)
    )

    commits_list = "\n".join(
        f"- `{c.sha}` **{c.author}** ({c.date.date().isoformat() if c.date else 'unknown date'}): "
        f"{c.message.splitlines()[0] if c.message else ''}"
        for c in commits
    )

    return f"""## Pull Request Details

**Title:** {pr.title}
**Author:** {pr.user.login}
**Base branch:** `{pr.base.ref}` ← **Head branch:** `{pr.head.ref}`
**Repository:** {repo_full_name}
**Description:**
{pr.body or "_No description provided_"}

**Stats:** {pr.additions} additions, {pr.deletions} deletions, {pr.changed_files} files changed

---

## Commits ({len(commits)})
{commits_list or "_No commits found_"}

---

## Changed Files & Diffs ({len(files)} shown)
{files_summary or "_No diff available_"}

---

Now analyze this PR and return the JSON report as instructed."""


def _bullets(items: list[str], marker: str = "-", empty: str = "_None_") -> str:
    return "\n".join(f"{marker} {item}" for item in items) or empty


def _risks_table(report: AnalysisReport) -> str:
    if not report.production_risks:
        return "_No production risks identified_ ✅"

    rows = [
        f"| {RISK_EMOJI.get(r.severity, UNKNOWN_EMOJI)} **{r.severity.upper()}** "
        f"| {r.area} | {r.description} | {r.recommendation} |"
        for r in report.production_risks
    ]
    return "| Severity | Area | Issue | Recommendation |\n|---|---|---|---|\n" + "\n".join(rows)


def format_comment_markdown(report: AnalysisReport, model: str, now: datetime | None = None) -> str:
    """Render the full analysis comment."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    risk_level = report.overall_risk_level or "unknown"
    risk_emoji = RISK_EMOJI.get(risk_level, UNKNOWN_EMOJI)

    quality = report.code_quality
    quality_score = f"**{quality.score:g}/10**" if quality.score is not None else "N/A"

    breaking = (
        "\n".join(f"> ⚠️ {b}" for b in report.breaking_changes)
        if report.breaking_changes
        else "_None detected_"
    )
    labels = " ".join(f"`{label}`" for label in report.labels) or "_None_"

    return f"""{COMMENT_TITLE}

> **Overall Risk Level:** {risk_emoji} `{risk_level.upper()}` &nbsp;|&nbsp; \
**Code Quality:** {quality_score} &nbsp;|&nbsp; **Type:** {report.purpose or "Unknown"}
> *Analyzed at {timestamp}*

---

### 📋 Summary
{report.summary or "_No summary generated_"}

---

### 🔑 Key Changes
{_bullets(report.key_changes)}

---

### 📝 Commit Highlights
{_bullets(report.commit_highlights)}

---

### 🚨 Production Risk Assessment
{_risks_table(report)}

---

### ⚡ Breaking Changes
{breaking}

---

### 🧪 Testing Notes
{report.testing_notes or "_No testing observations_"}

---

### 🏆 Code Quality
**Score:** {quality_score}

**Strengths:**
{_bullets(quality.strengths, "- ✅")}

**Concerns:**
{_bullets(quality.concerns, "- ⚠️")}

---

### 👥 Suggested Reviewers
{_bullets(report.suggested_reviewers, "- 👤")}

---

<details>
<summary>🏷️ Suggested Labels</summary>

{labels}
</details>

---
<sub>🤖 Generated by GitHub PR Assistant using OpenRouter AI · Model: `{model}`</sub>"""


def format_failure_comment(reason: str) -> str:
    """Comment posted when the model could not be called."""
    return f"{COMMENT_TITLE}\n\n> ⚠️ Analysis failed: {reason}\n\nPlease check the assistant logs."


def format_unparsed_comment(raw: str) -> str:
    """Comment posted when the model answered but no report could be parsed."""
    return (
        f"{COMMENT_TITLE}\n\n> ⚠️ Could not parse AI response. Raw output:\n\n"
        f"```\n{raw[:RAW_EXCERPT_CHARS]}\n```"
    )
