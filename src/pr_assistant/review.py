"""Pull request analysis pipeline: fetch context, ask the model, publish the result."""

import asyncio

import logfire
from pydantic import ValidationError

from pr_assistant.config import get_settings
from pr_assistant.github_client import (
    apply_labels,
    list_changed_files,
    list_commits,
    upsert_comment,
)
from pr_assistant.llm import analyze, parse_analysis
from pr_assistant.models import PullRequestWebhookPayload, UnparsedResponse
from pr_assistant.prompts import (
    build_system_prompt,
    build_user_prompt,
    format_comment_markdown,
    format_failure_comment,
    format_unparsed_comment,
)

PULL_REQUEST_EVENT = "pull_request"

ANALYSIS_MAX_TOKENS = 2048
ANALYSIS_TEMPERATURE = 0.2


async def process_delivery(event: str | None, delivery: str | None, data: dict) -> None:
    """Run one webhook delivery to completion.

    Used as the background task behind the webhook route. Errors are logged and
    the delivery is abandoned; nothing is retried.
    """
    try:
        if event == PULL_REQUEST_EVENT:
            await handle_pull_request_event(data)
        else:
            logfire.info(f"[{event}] no handler registered", event=event, delivery=delivery)
    except Exception:
        logfire.exception(f"[{event}] error processing delivery {delivery}", event=event, delivery=delivery)


async def handle_pull_request_event(data: dict) -> None:
    """Handle pull request events - analyse on open, reopen and new pushes."""
    try:
        payload = PullRequestWebhookPayload.model_validate(data)
    except ValidationError as e:
        logfire.error("[pr] Invalid webhook payload", errors=e.errors())
        return

    prefix = f"[pr] {payload.full_name}#{payload.pull_request.number}"

    if not payload.is_handled_action:
        logfire.info(f"{prefix} - skipped (action={payload.action})")
        return

    logfire.info(f"{prefix} - action={payload.action}, starting AI analysis")
    await analyze_pull_request(payload)


async def analyze_pull_request(payload: PullRequestWebhookPayload) -> None:
    """Analyse a PR with the model and publish the result as a single comment."""
    settings = get_settings()
    owner, repo = payload.owner, payload.repo
    pr = payload.pull_request
    prefix = f"[analysis] {payload.full_name}#{pr.number}"

    with logfire.span(prefix, repo=payload.full_name, pr_number=pr.number, action=payload.action):
        logfire.info(
            f"{prefix} - {pr.title!r} ({pr.base.ref} <- {pr.head.ref}), "
            f"+{pr.additions}/-{pr.deletions} across {pr.changed_files} files"
        )

        files, commits = await asyncio.gather(
            asyncio.to_thread(list_changed_files, owner, repo, pr.number),
            asyncio.to_thread(list_commits, owner, repo, pr.number),
        )
        logfire.info(f"{prefix} - retrieved {len(files)} files, {len(commits)} commits")

        system_prompt = build_system_prompt()
        user_prompt = build_user_prompt(pr, files, commits, payload.full_name)

        try:
            raw = await analyze(
                system_prompt,
                user_prompt,
                max_tokens=ANALYSIS_MAX_TOKENS,
                temperature=ANALYSIS_TEMPERATURE,
            )
        except Exception as e:
            logfire.error(f"{prefix} - AI call failed: {e}")
            await asyncio.to_thread(upsert_comment, owner, repo, pr.number, format_failure_comment(str(e)))
            return

        report = parse_analysis(raw)

        if isinstance(report, UnparsedResponse):
            logfire.error(f"{prefix} - could not parse AI response", raw_preview=raw[:500])
            await asyncio.to_thread(
                upsert_comment, owner, repo, pr.number, format_unparsed_comment(report.raw)
            )
            return

        logfire.info(
            f"{prefix} - risk level {report.overall_risk_level}",
            risk_level=report.overall_risk_level,
            production_risks=len(report.production_risks),
            breaking_changes=len(report.breaking_changes),
        )

        body = format_comment_markdown(report, model=settings.openrouter_model)
        await asyncio.to_thread(upsert_comment, owner, repo, pr.number, body)

        if report.labels:
            await asyncio.to_thread(apply_labels, owner, repo, pr.number, report.labels)

        logfire.info(f"{prefix} - done")
