"""Helpers for consuming streamed Ollama chat responses.

With ``stream=True`` the HTTP read timeout applies between chunks instead of
to the whole reply, so a long chapter (or a thinking model reasoning for a
while before it writes) does not time out as long as tokens keep arriving.
The wall-clock limit below caps the whole stream.
"""

import logging
import time
from collections.abc import Iterable
from typing import Any

import httpcore

logger = logging.getLogger(__name__)

DEFAULT_WALL_CLOCK_TIMEOUT = 600  # seconds


class StreamTimeoutError(TimeoutError):
    """Raised when a stream runs past its wall-clock limit.

    Attributes:
        partial_content_length: Characters received before the limit hit.
        elapsed_seconds: Time spent on the stream.
    """

    def __init__(self, message: str, *, partial_content_length: int, elapsed_seconds: float):
        super().__init__(message)
        self.partial_content_length = partial_content_length
        self.elapsed_seconds = elapsed_seconds


def consume_stream(
    stream: Iterable[Any],
    *,
    wall_clock_timeout: float = DEFAULT_WALL_CLOCK_TIMEOUT,
) -> dict[str, Any]:
    """Collect a streamed chat response into the non-streaming response shape.

    Args:
        stream: Chunks from ``client.chat(..., stream=True)``.
        wall_clock_timeout: Maximum seconds for the whole stream.

    Returns:
        Dict with ``message.content``, ``prompt_eval_count`` and ``eval_count``.

    Raises:
        StreamTimeoutError: If the stream runs longer than the limit.
        ConnectionError: If the connection drops mid-response.
    """
    parts: list[str] = []
    prompt_eval_count: int | None = None
    eval_count: int | None = None
    start = time.monotonic()

    try:
        for chunk in stream:
            elapsed = time.monotonic() - start
            if elapsed > wall_clock_timeout:
                received = sum(len(p) for p in parts)
                logger.error(
                    "Stream exceeded %.0fs after %d chars, giving up", wall_clock_timeout, received
                )
                raise StreamTimeoutError(
                    f"Generation took longer than {wall_clock_timeout:.0f}s",
                    partial_content_length=received,
                    elapsed_seconds=elapsed,
                )

            message = getattr(chunk, "message", None)
            content = getattr(message, "content", None)
            if content:
                parts.append(content)
            if getattr(chunk, "done", False):
                prompt_eval_count = getattr(chunk, "prompt_eval_count", None)
                eval_count = getattr(chunk, "eval_count", None)
    except (httpcore.RemoteProtocolError, httpcore.ReadError, httpcore.NetworkError) as e:
        logger.error("Ollama stream interrupted after %d chunks: %s", len(parts), e)
        raise ConnectionError(f"Ollama stream interrupted: {e}") from e

    content = "".join(parts)
    logger.debug(
        "Stream consumed: %d chunks, %d chars, %.2fs",
        len(parts),
        len(content),
        time.monotonic() - start,
    )
    return {
        "message": {"content": content},
        "prompt_eval_count": prompt_eval_count,
        "eval_count": eval_count,
    }
