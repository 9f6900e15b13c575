"""Send a fake pull_request delivery to a local server, or run the pipeline directly.

Usage:
    python -m pr_assistant.simulate               # POST to a running server
    python -m pr_assistant.simulate --standalone  # call the handler in-process
"""

import argparse
import asyncio
import json
import time

import httpx
import logfire

from pr_assistant.config import get_settings
from pr_assistant.review import handle_pull_request_event
from pr_assistant.signature import compute_signature

FAKE_PAYLOAD = {
    "action": "opened",
    "number": 42,
    "pull_request": {
        "number": 42,
        "title": "feat: add JWT authentication to /api/users endpoint",
        "body": "This PR adds JWT-based auth middleware to protect the user management API.\n\nCloses #38",
        "user": {"login": "dev-alice"},
        "base": {"ref": "main"},
        "head": {"ref": "feature/jwt-auth"},
        "additions": 180,
        "deletions": 25,
        "changed_files": 5,
    },
    "repository": {
        "name": "myapp",
        "full_name": "myorg/myapp",
        "owner": {"login": "myorg"},
    },
}


def build_request(payload: dict, secret: str | None) -> tuple[bytes, dict]:
    """Serialise a payload and build the headers GitHub would send with it."""
    body = json.dumps(payload).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        "X-GitHub-Event": "pull_request",
        "X-GitHub-Delivery": f"test-{int(time.time() * 1000)}",
    }
    if secret:
        headers["X-Hub-Signature-256"] = compute_signature(body, secret)
    return body, headers


def send(url: str) -> httpx.Response:
    settings = get_settings()
    body, headers = build_request(FAKE_PAYLOAD, settings.github_webhook_secret)

    logfire.info(f"[simulate] sending fake PR webhook to {url}")
    response = httpx.post(url, content=body, headers=headers, timeout=30)
    logfire.info(f"[simulate] response {response.status_code}: {response.text}")
    return response


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--standalone", action="store_true", help="run the pipeline without a server")
    parser.add_argument(
        "--url",
        default=f"http://localhost:{settings.port}{settings.api_prefix}/webhook",
        help="webhook URL of a running server",
    )
    args = parser.parse_args(argv)

    logfire.configure(send_to_logfire="if-token-present", service_name="github-pr-assistant")

    if args.standalone:
        asyncio.run(handle_pull_request_event(FAKE_PAYLOAD))
        logfire.info("[simulate] standalone run finished")
        return 0

    try:
        response = send(args.url)
    except httpx.HTTPError as e:
        logfire.error(f"[simulate] request failed: {e}. Is the server running?")
        return 1

    return 0 if response.is_success else 1


if __name__ == "__main__":
    raise SystemExit(main())
