"""Pytest fixtures for NusaCerita tests."""

import itertools
import logging
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

import src.settings._settings as settings_module
from src.memory.story_state import Character, DialogItem, Folder
from src.memory.story_store import StoryStore
from src.services.llm_client import clear_client_cache
from src.settings import Settings


@pytest.fixture(autouse=True, scope="function")
def cleanup_production_log_handlers():
    """Remove file handlers pointing to the production log after each test."""
    yield

    root_logger = logging.getLogger()
    production_log_name = "nusacerita.log"

    for handler in root_logger.handlers[:]:
        if isinstance(handler, logging.FileHandler) and production_log_name in getattr(
            handler, "baseFilename", ""
        ):
            handler.close()
            root_logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def isolate_settings_file(tmp_path, monkeypatch):
    """Redirect SETTINGS_FILE to a temp directory and clear the settings cache.

    Settings.load() writes defaults when the file is missing; without this
    fixture tests would create or overwrite the real src/settings.json.
    """
    monkeypatch.setattr(settings_module, "SETTINGS_FILE", tmp_path / "settings.json")
    Settings.clear_cache()
    yield tmp_path / "settings.json"
    Settings.clear_cache()


@pytest.fixture(autouse=True)
def clear_ollama_clients():
    """Drop cached Ollama clients so patched clients never leak between tests."""
    clear_client_cache()
    yield
    clear_client_cache()


@pytest.fixture
def id_factory() -> Callable[[str], str]:
    """Deterministic id factory: story_1, c_2, d_3, ..."""
    counter = itertools.count(1)

    def make_id(prefix: str) -> str:
        return f"{prefix}_{next(counter)}"

    return make_id


@pytest.fixture
def store(id_factory) -> StoryStore:
    """Store with the seed folders and one bootstrapped story (story_1 in f1)."""
    return StoryStore.with_defaults(id_factory=id_factory)


@pytest.fixture
def empty_store(id_factory) -> StoryStore:
    """Store with two folders and no stories."""
    folders = [Folder(id="f1", name="Novel"), Folder(id="f2", name="Ide")]
    return StoryStore(folders, id_factory=id_factory)


@pytest.fixture
def populated_store(store) -> StoryStore:
    """Store whose active story has a title, two characters and a dialog line."""
    story_id = store.active_story_id
    store.update_field(story_id, "main_title", "Legenda Danau Toba")
    store.update_field(story_id, "chapter_title", "Ikan Emas")
    store.update_field(story_id, "genres", ["Fantasi", "Drama"])
    store.update_field(
        story_id,
        "characters",
        [
            Character(id="c_a", name="Samosir", gender="Laki-laki", role="Protagonist"),
            Character(id="c_b", name="Putri", gender="Perempuan", role="Pendukung"),
        ],
    )
    store.update_field(
        story_id,
        "dialogs",
        [DialogItem(id="d_a", speaker="Samosir", text="Ikan apa ini?")],
    )
    return store


@pytest.fixture
def settings() -> Settings:
    """Default settings with fast retries."""
    return Settings(llm_max_retries=2, llm_retry_delay=0.0)


@pytest.fixture
def mock_gateway() -> MagicMock:
    """Generation gateway returning fixed plot and narrative text."""
    gateway = MagicMock()
    gateway.generate_plot.return_value = '{"synopsis": "P"}'
    gateway.generate_narrative.return_value = "N"
    gateway.check_health.return_value = (True, "Ollama is running")
    return gateway
