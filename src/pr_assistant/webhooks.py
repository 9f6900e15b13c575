"""GitHub webhook route."""

import json

import logfire
from fastapi import APIRouter, BackgroundTasks, Header, HTTPException, Request

from pr_assistant.config import get_settings
from pr_assistant.errors import ConfigurationError, SignatureError
from pr_assistant.models import HANDLED_PR_ACTIONS, WebhookEnvelope
from pr_assistant.review import PULL_REQUEST_EVENT, process_delivery
from pr_assistant.signature import check_signature

router = APIRouter()


def accepted(message: str, envelope: WebhookEnvelope) -> dict:
    return {
        "success": True,
        "message": message,
        "event": envelope.event,
        "delivery": envelope.delivery,
    }


@router.post("/webhook", status_code=202)
async def handle_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_hub_signature_256: str | None = Header(None),
    x_github_event: str | None = Header(None),
    x_event_type: str | None = Header(None),
    x_github_delivery: str | None = Header(None),
    x_delivery_id: str | None = Header(None),
):
    """Handle incoming GitHub webhooks.

    The delivery is acknowledged with 202 as soon as it is verified; analysis
    runs afterwards as a background task in this process.
    """
    settings = get_settings()
    envelope = WebhookEnvelope(
        raw_body=await request.body(),
        signature=x_hub_signature_256,
        event=x_github_event or x_event_type,
        delivery=x_github_delivery or x_delivery_id,
    )

    # Verify against the raw bytes before touching the JSON
    try:
        check_signature(
            envelope.raw_body,
            envelope.signature,
            settings.github_webhook_secret,
            production=settings.is_production,
        )
    except SignatureError as e:
        logfire.error(f"[{envelope.event}] Signature verification failed", delivery=envelope.delivery)
        raise HTTPException(status_code=401, detail=str(e)) from e
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    try:
        data = json.loads(envelope.raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON") from e

    action = data.get("action") if isinstance(data, dict) else None
    if not isinstance(action, str):
        action = None
    logfire.info(
        f"[{envelope.event}] received delivery={envelope.delivery}",
        event=envelope.event,
        action=action,
        delivery=envelope.delivery,
    )

    if envelope.event != PULL_REQUEST_EVENT:
        logfire.info(f"[{envelope.event}] no handler registered")
        return accepted("Event ignored", envelope)

    if action not in HANDLED_PR_ACTIONS:
        logfire.info(f"[{envelope.event}] action={action!r} skipped (not relevant)")
        return accepted(f"Action {action!r} ignored", envelope)

    background_tasks.add_task(process_delivery, envelope.event, envelope.delivery, data)
    return accepted("Analysis scheduled", envelope)
