"""Validation functions for Settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from src.settings._settings import Settings

logger = logging.getLogger(__name__)

LOG_LEVELS: dict[str, str] = {
    "DEBUG": "Debug",
    "INFO": "Info",
    "WARNING": "Warning",
    "ERROR": "Error",
}


def validate(settings: Settings) -> bool:
    """Validate all settings fields.

    Returns:
        True if any settings were mutated during validation (e.g. a
        lowercase log level normalized), False otherwise.

    Raises:
        ValueError: If any field contains an invalid value.
    """
    changed = _validate_log_level(settings)
    _validate_url(settings)
    _validate_model(settings)
    _validate_numeric_ranges(settings)
    _validate_temperatures(settings)
    _validate_retry_configuration(settings)
    _validate_timeouts(settings)
    return changed


def _validate_log_level(settings: Settings) -> bool:
    """Validate log_level is a known logging level.

    Returns:
        True if the level was normalized to upper case.
    """
    if not isinstance(settings.log_level, str):
        raise ValueError(f"log_level must be a string, got {type(settings.log_level).__name__}")
    normalized = settings.log_level.upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(
            f"log_level must be one of {list(LOG_LEVELS.keys())}, got {settings.log_level}"
        )
    if normalized != settings.log_level:
        logger.info("Normalized log_level %s -> %s", settings.log_level, normalized)
        settings.log_level = normalized
        return True
    return False


def _validate_url(settings: Settings) -> None:
    """Validate URL format for ollama_url."""
    try:
        parsed = urlparse(settings.ollama_url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"Invalid URL scheme in ollama_url: {settings.ollama_url}")
        if not parsed.netloc:
            raise ValueError(f"Invalid URL (missing host) in ollama_url: {settings.ollama_url}")
    except (AttributeError, TypeError) as e:
        raise ValueError(f"Invalid ollama_url: {settings.ollama_url} - {e}") from e


def _validate_model(settings: Settings) -> None:
    """Validate a model name is configured."""
    if not isinstance(settings.model, str) or not settings.model.strip():
        raise ValueError("model must be a non-empty model name")


def _validate_numeric_ranges(settings: Settings) -> None:
    """Validate numeric range constraints."""
    if not 1024 <= settings.context_size <= 128000:
        raise ValueError(
            f"context_size must be between 1024 and 128000, got {settings.context_size}"
        )

    if not 256 <= settings.max_tokens <= 32000:
        raise ValueError(f"max_tokens must be between 256 and 32000, got {settings.max_tokens}")


def _validate_temperatures(settings: Settings) -> None:
    """Validate generation temperatures."""
    for name in ("plot_temperature", "narrative_temperature"):
        temp = getattr(settings, name)
        if not 0.0 <= temp <= 2.0:
            raise ValueError(f"{name} must be between 0.0 and 2.0, got {temp}")


def _validate_retry_configuration(settings: Settings) -> None:
    """Validate LLM retry settings."""
    if not 1 <= settings.llm_max_retries <= 10:
        raise ValueError(
            f"llm_max_retries must be between 1 and 10, got {settings.llm_max_retries}"
        )

    if not 0.0 <= settings.llm_retry_delay <= 60.0:
        raise ValueError(
            f"llm_retry_delay must be between 0.0 and 60.0, got {settings.llm_retry_delay}"
        )

    if not 1.0 <= settings.llm_retry_backoff <= 5.0:
        raise ValueError(
            f"llm_retry_backoff must be between 1.0 and 5.0, got {settings.llm_retry_backoff}"
        )


def _validate_timeouts(settings: Settings) -> None:
    """Validate timeout settings."""
    if not 10 <= settings.ollama_timeout <= 1800:
        raise ValueError(
            f"ollama_timeout must be between 10 and 1800 seconds, got {settings.ollama_timeout}"
        )

    if not 1.0 <= settings.health_check_timeout <= 60.0:
        raise ValueError(
            f"health_check_timeout must be between 1.0 and 60.0 seconds, "
            f"got {settings.health_check_timeout}"
        )

    if not 60 <= settings.generation_wall_clock_timeout <= 7200:
        raise ValueError(
            f"generation_wall_clock_timeout must be between 60 and 7200 seconds, "
            f"got {settings.generation_wall_clock_timeout}"
        )
