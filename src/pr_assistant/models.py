"""Pydantic models for webhook payloads, PR context and AI analysis results."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

HANDLED_PR_ACTIONS = frozenset({"opened", "reopened", "synchronize"})

RiskLevel = Literal["critical", "high", "medium", "low"]


class WebhookEnvelope(BaseModel):
    """An inbound webhook delivery before its body has been parsed."""

    model_config = ConfigDict(frozen=True)

    raw_body: bytes
    signature: str | None = None
    event: str | None = None
    delivery: str | None = None


class GitHubUser(BaseModel):
    """GitHub user information."""

    login: str


class GitHubRef(BaseModel):
    """One side (base or head) of a pull request."""

    ref: str
    sha: str | None = None


class GitHubOwner(BaseModel):
    """Repository owner (user or organisation)."""

    login: str


class GitHubRepository(BaseModel):
    """GitHub repository information."""

    name: str
    owner: GitHubOwner
    full_name: str | None = None


class GitHubPullRequest(BaseModel):
    """GitHub pull request information."""

    number: int
    title: str
    body: str | None = None
    user: GitHubUser
    base: GitHubRef
    head: GitHubRef
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0


class PullRequestWebhookPayload(BaseModel):
    """Payload for pull_request webhook events."""

    action: str
    pull_request: GitHubPullRequest
    repository: GitHubRepository

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo(self) -> str:
        return self.repository.name

    @property
    def full_name(self) -> str:
        return self.repository.full_name or f"{self.owner}/{self.repo}"

    @property
    def is_handled_action(self) -> bool:
        return self.action in HANDLED_PR_ACTIONS


class ChangedFile(BaseModel):
    """A file changed by a PR, with its patch bounded in length."""

    filename: str
    status: str
    additions: int = 0
    deletions: int = 0
    patch: str


class CommitSummary(BaseModel):
    """A commit on a PR."""

    sha: str
    message: str
    author: str
    date: datetime | None = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        # Models emit null for "nothing to report"; fall back to field defaults.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ProductionRisk(_CamelModel):
    """A risk the change could introduce in production."""

    severity: RiskLevel = "medium"
    area: str = "General"
    description: str = ""
    recommendation: str = ""

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class CodeQuality(_CamelModel):
    """Code quality assessment."""

    score: float | None = Field(default=None, ge=1, le=10)
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)


class AnalysisReport(_CamelModel):
    """Structured PR analysis returned by the AI model.

    Field names follow the camelCase keys the model is asked to emit.
    """

    summary: str = ""
    purpose: str = ""
    key_changes: list[str] = Field(default_factory=list)
    commit_highlights: list[str] = Field(default_factory=list)
    production_risks: list[ProductionRisk] = Field(default_factory=list)
    code_quality: CodeQuality = Field(default_factory=CodeQuality)
    testing_notes: str = ""
    breaking_changes: list[str] = Field(default_factory=list)
    suggested_reviewers: list[str] = Field(default_factory=list)
    overall_risk_level: RiskLevel | None = None
    labels: list[str] = Field(default_factory=list)

    @field_validator("overall_risk_level", mode="before")
    @classmethod
    def _lower_risk_level(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class UnparsedResponse(BaseModel):
    """An AI response from which no valid report could be extracted."""

    raw: str
