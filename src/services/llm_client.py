"""Shared Ollama client utilities.

Clients are cached per (url, timeout). ``chat_text`` streams ``client.chat``
so the read timeout applies between chunks, retries connection errors and
timeouts with exponential backoff, and maps every failure onto the
GenerationError hierarchy.
"""

import logging
import threading
import time
from typing import Any

import httpx
import ollama

from src.settings import Settings
from src.utils.exceptions import GenerationError, LLMConnectionError, MalformedResponseError
from src.utils.logging_config import log_performance
from src.utils.streaming import StreamTimeoutError, consume_stream

logger = logging.getLogger(__name__)

# Module-level cache for Ollama clients (keyed by (url, timeout))
_ollama_clients: dict[tuple[str, float], ollama.Client] = {}
_ollama_clients_lock = threading.Lock()

# Errors worth retrying: the server may come back or the request may fit next time
_TRANSIENT_ERRORS = (ConnectionError, TimeoutError, httpx.TimeoutException, httpx.TransportError)


def get_ollama_client(settings: Settings, timeout: float | None = None) -> ollama.Client:
    """Get or create an Ollama client for the given settings.

    Thread-safe via double-checked locking.

    Args:
        settings: Application settings with ollama_url and ollama_timeout.
        timeout: Optional timeout override (seconds), e.g. for health checks.

    Returns:
        Ollama client configured for the given settings.
    """
    effective_timeout = float(timeout if timeout is not None else settings.ollama_timeout)
    cache_key = (settings.ollama_url, effective_timeout)

    if cache_key not in _ollama_clients:
        with _ollama_clients_lock:
            if cache_key not in _ollama_clients:
                _ollama_clients[cache_key] = ollama.Client(
                    host=settings.ollama_url, timeout=effective_timeout
                )
                logger.debug(
                    "Created Ollama client for %s (timeout=%.0fs)",
                    settings.ollama_url,
                    effective_timeout,
                )

    return _ollama_clients[cache_key]


def clear_client_cache() -> None:
    """Drop all cached clients (after a URL change, and in tests)."""
    with _ollama_clients_lock:
        _ollama_clients.clear()


def chat_text(
    settings: Settings,
    prompt: str,
    *,
    system_prompt: str | None = None,
    temperature: float = 0.8,
    json_schema: dict[str, Any] | None = None,
    operation: str = "LLM call",
) -> str:
    """Send one chat request and return the message content.

    Args:
        settings: Application settings (model, url, limits, retry policy).
        prompt: The user prompt to send.
        system_prompt: Optional system prompt.
        temperature: Sampling temperature.
        json_schema: Optional JSON schema passed as ``format=`` for
            grammar-constrained output.
        operation: Label used in performance logs.

    Returns:
        The stripped response text.

    Raises:
        LLMConnectionError: If the server stays unreachable after all retries.
        MalformedResponseError: If the response has no usable content.
        GenerationError: On Ollama response errors or when the stream runs past
            ``generation_wall_clock_timeout`` (neither is retried).
    """
    client = get_ollama_client(settings)

    messages: list[dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})

    options = {
        "temperature": temperature,
        "num_ctx": settings.context_size,
        "num_predict": settings.max_tokens,
    }

    max_retries = settings.llm_max_retries
    delay = settings.llm_retry_delay
    last_error: Exception | None = None

    for attempt in range(max_retries):
        try:
            with log_performance(logger, f"{operation} ({settings.model})"):
                stream = client.chat(
                    model=settings.model,
                    messages=messages,
                    options=options,
                    format=json_schema,
                    stream=True,
                )
                response = consume_stream(
                    stream, wall_clock_timeout=settings.generation_wall_clock_timeout
                )
        except StreamTimeoutError as e:
            # Wall-clock timeouts are final
            raise GenerationError(f"{operation} timed out: {e}") from e
        except _TRANSIENT_ERRORS as e:
            last_error = e
            logger.warning(
                "Transient error in %s (attempt %d/%d): %s",
                operation,
                attempt + 1,
                max_retries,
                e,
            )
            if attempt < max_retries - 1:
                logger.debug("Backing off %.1fs before retry", delay)
                time.sleep(delay)
                delay *= settings.llm_retry_backoff
            continue
        except ollama.ResponseError as e:
            logger.error("Ollama response error during %s: %s", operation, e)
            raise GenerationError(f"{operation} failed: {e}") from e

        content = response["message"]["content"]
        if not content or not content.strip():
            raise MalformedResponseError(f"{operation} returned an empty response", content)

        logger.info(
            "%s complete: model=%s, tokens: %s+%s",
            operation,
            settings.model,
            response.get("prompt_eval_count"),
            response.get("eval_count"),
        )
        return content.strip()

    logger.error("%s failed after %d attempts", operation, max_retries)
    raise LLMConnectionError(
        f"Cannot reach Ollama at {settings.ollama_url} after {max_retries} attempts: {last_error}"
    ) from last_error
