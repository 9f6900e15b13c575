"""Exception types raised by the PR assistant."""


class AssistantError(Exception):
    """Base class for PR assistant errors."""


class ConfigurationError(AssistantError):
    """A required secret, token or API key is not configured."""


class SignatureError(AssistantError):
    """The webhook signature is missing or does not match the payload."""


class UpstreamAPIError(AssistantError):
    """A call to the AI endpoint or the GitHub API failed."""


class AIResponseError(UpstreamAPIError):
    """The AI endpoint answered without usable content."""
