"""Story service - runs the two-step generation pipeline for one story."""

import logging

from src.memory.story_state import StoryState
from src.memory.story_store import StoryStore
from src.services.generation_service import GenerationService
from src.settings import Settings
from src.utils.logging_config import log_context

logger = logging.getLogger(__name__)


class StoryService:
    """Plot-then-narrative generation workflow.

    The story is captured when a run starts. Both results are written back to
    that story id, never to whatever story is active when a call returns.
    """

    def __init__(self, settings: Settings, generation: GenerationService):
        """Initialize story service.

        Args:
            settings: Application settings.
            generation: Gateway used for the model calls.
        """
        logger.debug("Initializing StoryService")
        self.settings = settings
        self.generation = generation

    def generate(self, store: StoryStore, story_id: str) -> StoryState | None:
        """Generate the plot outline, then the narrative, for a story.

        Blocking; the UI runs this in a worker thread. If the plot call fails
        the narrative call is never made. If the narrative call fails the
        stored plot is kept.

        Args:
            store: Store holding the story.
            story_id: Story to generate for.

        Returns:
            The story after both results were recorded, or None if the id is
            unknown.

        Raises:
            GenerationError: If either gateway call fails.
        """
        story = store.get_story(story_id)
        if story is None:
            logger.warning("Cannot generate: unknown story %s", story_id)
            return None

        with log_context(f"gen-{story_id}"):
            logger.info(
                "Generating chapter %d of '%s' (%s)",
                story.chapter_number,
                story.main_title,
                story_id,
            )

            plot = self.generation.generate_plot(story)
            store.record_plot(story_id, plot)

            narrative = self.generation.generate_narrative(story, plot)
            store.record_narrative(story_id, narrative)

            logger.info("Generation finished for story %s", story_id)
        return store.get_story(story_id)
