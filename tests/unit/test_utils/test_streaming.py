"""Tests for consuming streamed chat responses."""

import itertools
from types import SimpleNamespace
from unittest.mock import patch

import httpcore
import pytest

from src.utils.streaming import StreamTimeoutError, consume_stream


def _chunk(content: str | None = None, done: bool = False, **counts) -> SimpleNamespace:
    """Build a chunk shaped like an Ollama ChatResponse."""
    message = SimpleNamespace(content=content) if content is not None else None
    return SimpleNamespace(message=message, done=done, **counts)


class TestConsumeStream:
    """Tests for consume_stream."""

    def test_joins_content_and_reads_counts(self):
        """Content chunks are concatenated; counts come from the done chunk."""
        stream = [
            _chunk("Pada "),
            _chunk("suatu hari"),
            _chunk("", done=True, prompt_eval_count=12, eval_count=34),
        ]

        response = consume_stream(stream)

        assert response == {
            "message": {"content": "Pada suatu hari"},
            "prompt_eval_count": 12,
            "eval_count": 34,
        }

    def test_empty_stream(self):
        """No chunks give empty content and no counts."""
        response = consume_stream(iter([]))

        assert response["message"]["content"] == ""
        assert response["eval_count"] is None

    def test_chunks_without_message_are_skipped(self):
        """Chunks without a message add nothing."""
        response = consume_stream([_chunk(None), _chunk("Ya"), _chunk(None, done=True)])

        assert response["message"]["content"] == "Ya"

    def test_dropped_connection_becomes_connection_error(self):
        """Transport errors mid-stream surface as ConnectionError."""

        def stream():
            yield _chunk("Pada ")
            raise httpcore.RemoteProtocolError("peer closed connection")

        with pytest.raises(ConnectionError, match="interrupted"):
            consume_stream(stream())

    def test_wall_clock_limit(self):
        """A stream past its wall-clock limit stops with what it received."""
        stream = [_chunk("abc"), _chunk("def"), _chunk("", done=True)]
        clock = itertools.chain([0.0, 1.0], itertools.repeat(100.0))

        with patch("src.utils.streaming.time.monotonic", side_effect=clock):
            with pytest.raises(StreamTimeoutError) as exc_info:
                consume_stream(stream, wall_clock_timeout=60)

        assert exc_info.value.partial_content_length == 3
        assert exc_info.value.elapsed_seconds == 100.0
        assert isinstance(exc_info.value, TimeoutError)
