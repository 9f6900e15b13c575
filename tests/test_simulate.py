"""Tests for the local webhook simulator."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from pr_assistant.models import PullRequestWebhookPayload
from pr_assistant.signature import verify_signature
from pr_assistant.simulate import FAKE_PAYLOAD, build_request, main


class TestBuildRequest:
    def test_signed_when_secret_set(self):
        """Test the request carries a valid signature for its exact body."""
        body, headers = build_request(FAKE_PAYLOAD, "secret")

        assert json.loads(body) == FAKE_PAYLOAD
        assert headers["X-GitHub-Event"] == "pull_request"
        assert headers["X-GitHub-Delivery"].startswith("test-")
        assert verify_signature(body, headers["X-Hub-Signature-256"], "secret")

    def test_unsigned_without_secret(self):
        """Test no signature header is sent without a secret."""
        _, headers = build_request(FAKE_PAYLOAD, None)
        assert "X-Hub-Signature-256" not in headers

    def test_fake_payload_is_valid(self):
        """Test the fake payload validates as a pull_request event."""
        payload = PullRequestWebhookPayload.model_validate(FAKE_PAYLOAD)
        assert payload.is_handled_action


class TestMain:
    def test_standalone_runs_handler(self):
        """Test --standalone calls the pipeline in-process."""
        with (
            patch("pr_assistant.simulate.logfire"),
            patch("pr_assistant.simulate.handle_pull_request_event", new_callable=AsyncMock) as mock_handle,
        ):
            assert main(["--standalone"]) == 0

        mock_handle.assert_awaited_once_with(FAKE_PAYLOAD)

    def test_posts_to_server(self, configure):
        """Test the default mode posts a signed delivery to the given URL."""
        configure(github_webhook_secret="secret")

        with (
            patch("pr_assistant.simulate.logfire"),
            patch("pr_assistant.simulate.httpx.post") as mock_post,
        ):
            mock_post.return_value = MagicMock(is_success=True, status_code=202, text="{}")
            assert main(["--url", "http://localhost:9999/webhook"]) == 0

        args, kwargs = mock_post.call_args
        assert args[0] == "http://localhost:9999/webhook"
        assert verify_signature(kwargs["content"], kwargs["headers"]["X-Hub-Signature-256"], "secret")
