"""Main Settings dataclass for NusaCerita.

Settings are stored in settings.json. Story data is never written here; the
editor state lives only in memory.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import shutil
import tempfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, ClassVar

from src.settings import _validation as _validation_mod
from src.settings._paths import SETTINGS_FILE
from src.utils.exceptions import ConfigError

# Configure module logger
logger = logging.getLogger(__name__)


def _merge_with_defaults(data: dict[str, Any], settings_cls: type[Settings]) -> bool:
    """Merge loaded JSON data with dataclass defaults.

    - Adds missing keys with their default values
    - Removes keys that no longer exist in the dataclass

    Modifies *data* in place.

    Returns:
        True if any changes were made, False otherwise.
    """
    default_dict = asdict(settings_cls())
    known_fields = {f.name for f in fields(settings_cls)}
    changed = False

    for key in list(data):
        if key not in known_fields:
            logger.info("Removing obsolete setting: %s", key)
            del data[key]
            changed = True

    for key in sorted(known_fields):
        if key not in data:
            logger.info("Adding new setting with default: %s", key)
            data[key] = default_dict[key]
            changed = True

    logger.debug("Merge summary: %d known fields, changed=%s", len(known_fields), changed)
    return changed


def _atomic_write_json(path: Path | str, data: dict[str, Any]) -> None:
    """Write JSON to *path* atomically via a temp file + rename."""
    path = Path(path)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, str(path))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_err:
            logger.warning("Failed to remove temp settings file %s: %s", tmp_path, cleanup_err)
        raise


def _backup_corrupt_file(path: Path) -> None:
    """Copy an unreadable settings file aside so defaults can replace it."""
    backup_path = path.with_suffix(".json.corrupt")
    try:
        shutil.copy(path, backup_path)
        logger.info("Backed up corrupted settings to %s", backup_path)
    except OSError as copy_err:
        logger.warning("Failed to backup corrupted settings: %s", copy_err)


@dataclass
class Settings:
    """Application settings, stored as JSON."""

    # Ollama connection
    ollama_url: str = "http://localhost:11434"
    model: str = "qwen3:8b"
    ollama_timeout: int = 120  # Read timeout between streamed chunks (seconds)
    generation_wall_clock_timeout: int = 600  # Limit for one whole streamed reply (seconds)
    health_check_timeout: float = 5.0

    # Generation
    context_size: int = 32768
    max_tokens: int = 4096
    plot_temperature: float = 0.4  # Lower for structured JSON output
    narrative_temperature: float = 0.9

    # Retry on connection errors and timeouts
    llm_max_retries: int = 3
    llm_retry_delay: float = 1.0
    llm_retry_backoff: float = 2.0

    # Logging & UI
    log_level: str = "INFO"
    dark_mode: bool = False
    sidebar_open: bool = True

    # Class-level cache for settings (speeds up repeated load() calls)
    _cached_instance: ClassVar[Settings | None] = None

    def save(self) -> None:
        """Validate and save settings to the JSON file."""
        self.validate()
        _atomic_write_json(SETTINGS_FILE, asdict(self))
        logger.info("Settings saved to %s", SETTINGS_FILE)

    def validate(self) -> bool:
        """Validate all settings fields. Delegates to _validation module.

        Returns:
            True if any settings were normalized during validation.

        Raises:
            ValueError: If any field contains an invalid value.
        """
        return _validation_mod.validate(self)

    @classmethod
    def load(cls, use_cache: bool = True) -> Settings:
        """Load settings from JSON file, or create defaults.

        New settings get default values and removed settings are cleaned up;
        customized values are preserved. A corrupt file is backed up to
        ``settings.json.corrupt`` and replaced with defaults.

        Args:
            use_cache: If True, return cached instance if available. Set to False
                to force reload from disk.

        Returns:
            Settings instance.

        Raises:
            ConfigError: If a stored value is out of range or has the wrong type
                (a ValueError subclass).
        """
        if use_cache and cls._cached_instance is not None:
            return cls._cached_instance

        data: dict[str, Any] = {}
        if SETTINGS_FILE.exists():
            try:
                with open(SETTINGS_FILE) as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.error(
                        "Corrupted settings file (expected JSON object, got %s)",
                        type(loaded).__name__,
                    )
                    _backup_corrupt_file(SETTINGS_FILE)
            except json.JSONDecodeError as e:
                logger.error("Corrupted settings file (invalid JSON): %s", e)
                _backup_corrupt_file(SETTINGS_FILE)
            except OSError as e:
                logger.error("Cannot read settings file (may be locked or inaccessible): %s", e)

        original_data = copy.deepcopy(data)
        changed = _merge_with_defaults(data, cls)

        try:
            settings = cls(**data)
            changed = settings.validate() or changed
        except TypeError as e:
            raise ConfigError(f"A setting has an invalid type: {e}") from e
        except ValueError as e:
            raise ConfigError(f"Invalid setting in {SETTINGS_FILE}: {e}") from e

        if changed or not original_data:
            logger.info("Settings updated during load, saving to %s", SETTINGS_FILE)
            try:
                _atomic_write_json(SETTINGS_FILE, asdict(settings))
            except OSError as write_err:
                logger.warning(
                    "Could not persist settings to disk: %s - "
                    "settings are loaded in memory but changes will not survive restart",
                    write_err,
                )

        cls._cached_instance = settings
        return settings

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the cached settings instance.

        Use this in tests that need to verify settings loading behavior.
        """
        cls._cached_instance = None
