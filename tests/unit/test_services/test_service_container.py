"""Tests for ServiceContainer initialization."""

import logging
from unittest.mock import patch

from src.services import GenerationService, ServiceContainer, StoryService
from src.settings import Settings


class TestServiceContainer:
    """Tests for ServiceContainer class."""

    def test_init_with_provided_settings(self):
        """Test ServiceContainer initialization with provided settings."""
        settings = Settings()
        container = ServiceContainer(settings)

        assert container.settings is settings
        assert isinstance(container.generation, GenerationService)
        assert isinstance(container.story, StoryService)

    def test_services_share_settings_and_gateway(self):
        """The story service runs on the container's gateway."""
        container = ServiceContainer(Settings())

        assert container.generation.settings is container.settings
        assert container.story.settings is container.settings
        assert container.story.generation is container.generation

    def test_init_loads_settings_if_not_provided(self):
        """Test ServiceContainer loads settings when None is passed."""
        with patch("src.services.Settings.load") as mock_load:
            mock_settings = Settings()
            mock_load.return_value = mock_settings

            container = ServiceContainer(None)

            mock_load.assert_called_once()
            assert container.settings is mock_settings

    def test_init_logs_timing(self, caplog):
        """Test ServiceContainer logs initialization timing at INFO level."""
        with caplog.at_level(logging.INFO, logger="src.services"):
            ServiceContainer(Settings())

        messages = [r.getMessage() for r in caplog.records]
        assert any("Initializing ServiceContainer" in m for m in messages)
        assert any("ServiceContainer initialized in" in m for m in messages)
