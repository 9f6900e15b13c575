"""LLM integration for PR analysis using pydantic-ai over OpenRouter."""

import json
import re
from functools import lru_cache
from typing import Any

import logfire
from openai import AsyncOpenAI
from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.exceptions import UnexpectedModelBehavior
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from pr_assistant.config import get_settings
from pr_assistant.errors import AIResponseError, ConfigurationError
from pr_assistant.models import AnalysisReport, UnparsedResponse

# Instrument pydantic-ai with logfire for tracing LLM calls
logfire.instrument_pydantic_ai()

DEFAULT_MAX_TOKENS = 2048
DEFAULT_TEMPERATURE = 0.3

FENCED_JSON_PATTERN = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)


@lru_cache
def get_ai_model() -> OpenAIChatModel:
    """Get the process-wide chat model, creating it on first use."""
    settings = get_settings()

    if not settings.openrouter_api_key:
        raise ConfigurationError("OPENROUTER_API_KEY environment variable is not set")

    client = AsyncOpenAI(
        base_url=settings.openrouter_base_url,
        api_key=settings.openrouter_api_key,
        default_headers={
            "HTTP-Referer": settings.openrouter_app_url,
            "X-Title": settings.openrouter_app_name,
        },
    )

    return OpenAIChatModel(
        settings.openrouter_model,
        provider=OpenAIProvider(openai_client=client),
    )


async def analyze(
    system_prompt: str,
    user_prompt: str,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    temperature: float = DEFAULT_TEMPERATURE,
) -> str:
    """Send one system + user prompt pair to the model and return its text."""
    settings = get_settings()
    model = get_ai_model()

    logfire.info(
        f"[ai] calling {settings.openrouter_model}",
        model=settings.openrouter_model,
        max_tokens=max_tokens,
        temperature=temperature,
        prompt_length=len(user_prompt),
    )

    # Single turn: no tools, no output retries.
    agent = Agent(model, output_type=str, system_prompt=system_prompt, retries=0)
    try:
        result = await agent.run(
            user_prompt,
            model_settings={"max_tokens": max_tokens, "temperature": temperature},
        )
    except UnexpectedModelBehavior as e:
        # pydantic-ai rejects a reply with no text before we ever see the output
        logfire.warn(f"[ai] unusable model response: {e}")
        raise AIResponseError("Empty response from AI model") from e

    text = result.output
    if not text or not text.strip():
        raise AIResponseError("Empty response from AI model")

    logfire.info(f"[ai] responded ({len(text)} chars)", response_length=len(text))
    return text


def extract_json(text: str) -> Any | None:
    """Pull a JSON value out of a model response.

    Tries the first ```json fenced block, then the whole response. Returns None
    when neither parses.
    """
    fenced = FENCED_JSON_PATTERN.search(text)
    if fenced:
        try:
            return json.loads(fenced.group(1).strip())
        except json.JSONDecodeError:
            pass

    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        return None


def parse_analysis(text: str) -> AnalysisReport | UnparsedResponse:
    """Turn a model response into a validated report, or mark it unparsed."""
    data = extract_json(text)
    if data is None:
        logfire.warn("[ai] no JSON found in response", response_length=len(text))
        return UnparsedResponse(raw=text)

    try:
        return AnalysisReport.model_validate(data)
    except ValidationError as e:
        logfire.warn("[ai] response did not match the report schema", errors=e.errors())
        return UnparsedResponse(raw=text)
