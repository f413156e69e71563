"""Centralized exception hierarchy for NusaCerita.

Exception Hierarchy:

    NusaCeritaError (base for all application errors)
    ├── GenerationError (any failure of the text generation gateway)
    │   ├── LLMConnectionError (server unreachable or timed out after retries)
    │   └── MalformedResponseError (empty or schema-invalid model output)
    └── ConfigError (configuration parsing/validation failures)

Store operations never raise for unknown ids or blank input; they log and
leave the state unchanged.

Usage:
    from src.utils.exceptions import GenerationError

    try:
        services.story.generate(store, story_id)
    except GenerationError:
        logger.exception("Generation failed")
"""

import logging

logger = logging.getLogger(__name__)


def summarize_error(error: Exception, max_length: int = 300) -> str:
    """Create a concise summary of an exception for logging.

    Ollama response errors and pydantic validation errors can carry the full
    raw model output. This keeps log lines readable.

    Args:
        error: The exception to summarize.
        max_length: Maximum length of the summary string.

    Returns:
        A concise error summary suitable for log messages.
    """
    error_type = type(error).__name__
    msg = str(error)

    if len(msg) <= max_length:
        return f"{error_type}: {msg}"

    return f"{error_type}: {msg[:max_length]}... [{len(msg) - max_length} chars truncated]"


class NusaCeritaError(Exception):
    """Base exception for all NusaCerita errors.

    All custom exceptions inherit from this class so callers can catch
    every application-specific error with a single except clause.
    """

    pass


class GenerationError(NusaCeritaError):
    """Raised when the generation gateway fails.

    Covers network and auth failures, Ollama model errors and output that
    cannot be used. The story being generated is left as it was before the
    failing call.
    """

    pass


class LLMConnectionError(GenerationError):
    """Raised when the Ollama server cannot be reached.

    Raised after the configured retries for connection errors and timeouts
    are exhausted.
    """

    pass


class MalformedResponseError(GenerationError):
    """Raised when the model answers with empty or invalid content.

    Attributes:
        raw_response: The offending model output, truncated for logging.
    """

    def __init__(self, message: str, raw_response: str | None = None):
        """Initialize MalformedResponseError.

        Args:
            message: Human-readable error message.
            raw_response: The raw model output that failed validation.
        """
        super().__init__(message)
        self.raw_response = raw_response[:500] if raw_response else raw_response
        logger.debug(
            "MalformedResponseError initialized: message=%s, raw_len=%s",
            message,
            len(raw_response) if raw_response else 0,
        )


class ConfigError(NusaCeritaError, ValueError):
    """Raised when configuration cannot be loaded or is invalid.

    Also a ValueError, so callers that only know the settings contract
    (``Settings.load`` raises ValueError) still catch it.
    """

    pass
