"""Services layer - generation logic separated from UI.

This module provides a clean interface between the UI and the Ollama-backed
generation calls.
"""

import logging
import time
from dataclasses import dataclass

from src.settings import Settings

from .generation_service import GenerationService
from .story_service import StoryService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Dependency injection container for all services.

    Usage:
        settings = Settings.load()
        services = ServiceContainer(settings)

        services.story.generate(store, store.active_story_id)
    """

    settings: Settings
    generation: GenerationService
    story: StoryService

    def __init__(self, settings: Settings | None = None):
        """Create and wire service instances that share a Settings object.

        Args:
            settings: Application settings. If omitted, loaded via Settings.load().
        """
        t0 = time.perf_counter()
        logger.info("Initializing ServiceContainer...")
        self.settings = settings or Settings.load()
        self.generation = GenerationService(self.settings)
        self.story = StoryService(self.settings, self.generation)
        logger.info("ServiceContainer initialized in %.2fs", time.perf_counter() - t0)


__all__ = [
    "GenerationService",
    "ServiceContainer",
    "StoryService",
]
