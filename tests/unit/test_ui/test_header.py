"""Tests for the header component."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.memory.story_store import StoryStore
from src.ui.components.header import Header
from src.ui.state import AppState


@pytest.fixture
def header(populated_store, settings, mock_gateway):
    """Header with mocked buttons and labels in place of built elements."""
    services = MagicMock()
    services.settings = settings
    services.generation = mock_gateway
    h = Header(
        AppState(store=populated_store),
        services,
        on_toggle_sidebar=MagicMock(),
        on_fill_example=MagicMock(),
        on_generate=AsyncMock(),
    )
    h._breadcrumb = MagicMock()
    h._generate_btn = MagicMock()
    h._fill_btn = MagicMock()
    h._status_label = MagicMock()
    return h


class TestBreadcrumb:
    """Tests for the breadcrumb text."""

    def test_active_story(self, header):
        """Shows title and chapter of the active story."""
        assert header.breadcrumb_text() == "Legenda Danau Toba / Chapter 1"

    def test_untitled(self, header):
        """Empty titles show a placeholder."""
        header.state = AppState(store=StoryStore.with_defaults())
        assert header.breadcrumb_text() == "(Untitled) / Chapter 1"

    def test_no_story(self, empty_store, header):
        """Without an active story there is nothing to show."""
        header.state = AppState(store=empty_store)
        assert header.breadcrumb_text() == "No story selected"


class TestRefresh:
    """Tests for Header.refresh."""

    def test_idle(self, header):
        """Buttons are enabled while nothing runs."""
        header.refresh()

        assert header._breadcrumb.text == "Legenda Danau Toba / Chapter 1"
        assert header._generate_btn.text == "Generate Plot & Story"
        header._generate_btn.enable.assert_called_once()
        header._fill_btn.enable.assert_called_once()

    def test_generating(self, header):
        """Generate and fill are disabled during a run."""
        header.state.begin_generation(header.state.store.active_story_id)

        header.refresh()

        assert header._generate_btn.text == "Generating..."
        header._generate_btn.disable.assert_called_once()
        header._fill_btn.disable.assert_called_once()

    def test_no_story_disables_actions(self, empty_store, header):
        """Nothing to generate without an active story."""
        header.state = AppState(store=empty_store)

        header.refresh()

        header._generate_btn.disable.assert_called_once()
        header._fill_btn.disable.assert_called_once()


class TestRefreshStatus:
    """Tests for the Ollama status display."""

    @staticmethod
    async def _io_bound(func, *args, **kwargs):
        return func(*args, **kwargs)

    async def test_healthy_shows_model(self, header, settings):
        """A healthy server shows the model name."""
        with patch("src.ui.components.header.run.io_bound", side_effect=self._io_bound):
            await header.refresh_status()

        assert header._status_label.text == settings.model
        header._status_label.tooltip.assert_called_once_with("Ollama is running")

    async def test_offline(self, header, mock_gateway):
        """An unhealthy server shows Offline with the reason."""
        mock_gateway.check_health.return_value = (False, "Cannot connect to Ollama: refused")

        with patch("src.ui.components.header.run.io_bound", side_effect=self._io_bound):
            await header.refresh_status()

        assert header._status_label.text == "Offline"
        header._status_label.tooltip.assert_called_once_with("Cannot connect to Ollama: refused")
