"""Cleanup of raw model output before it is stored or parsed."""

import logging
import re

logger = logging.getLogger(__name__)

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)
_ORPHAN_THINK_TAG = re.compile(r"</?think>")
_SPECIAL_TOKEN = re.compile(r"<\|.*?\|>")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


def clean_llm_text(text: str) -> str:
    """Remove reasoning blocks and tokenizer artifacts from model output.

    Args:
        text: Raw text from the model.

    Returns:
        Text suitable for display.
    """
    if not text:
        return text

    cleaned = _THINK_BLOCK.sub("", text)
    cleaned = _ORPHAN_THINK_TAG.sub("", cleaned)
    cleaned = _SPECIAL_TOKEN.sub("", cleaned)  # e.g. <|endoftext|>
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    cleaned = cleaned.strip()

    if len(cleaned) != len(text.strip()):
        logger.debug("Cleaned model output: %d -> %d chars", len(text), len(cleaned))
    return cleaned


def extract_json_text(text: str) -> str:
    """Get the JSON document out of a model reply.

    Reasoning blocks are dropped and a fenced code block is unwrapped. Text
    that does not already start as JSON is cut to the span from the first
    ``{`` to the last ``}``. Text without braces is returned as is, so the caller's
    parser reports the error.
    """
    cleaned = clean_llm_text(text)
    fenced = _FENCED_BLOCK.search(cleaned)
    if fenced:
        return fenced.group(1)
    if cleaned.startswith(("{", "[")):
        return cleaned
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start : end + 1]
    return cleaned
