"""Editor page - the chapter form for the active story.

This package splits the EditorPage into focused modules:
- _fields: Basic information, setting and classification sections
- _content: Character and dialog list editors
- _generation: Plot & story generation, results display, next chapter
"""

import logging
from collections.abc import Callable
from typing import Any, Literal

from nicegui import Client, context, ui

from src.memory.story_state import StoryState
from src.services import ServiceContainer
from src.ui.state import AppState

from . import _content, _fields, _generation

logger = logging.getLogger(__name__)


class EditorPage:
    """Form editor for the active story.

    Sections (top to bottom):
    - Basic information, setting, classification
    - Characters and dialogs
    - Generation results and the next-chapter action
    """

    def __init__(
        self,
        state: AppState,
        services: ServiceContainer,
        on_story_change: Callable[[], None] | None = None,
    ):
        """Create an EditorPage.

        Args:
            state: Application state holding the story store.
            services: Service container (generation pipeline).
            on_story_change: Called after changes that other components show
                (titles, chapter, generation status).
        """
        self.state = state
        self.services = services
        self.on_story_change = on_story_change

        # UI references
        self._client: Client | None = None
        self._container: ui.column | None = None
        self._genre_container: ui.column | None = None
        self._characters_container: ui.column | None = None
        self._dialogs_container: ui.column | None = None
        self._results_container: ui.column | None = None

        # What the form currently shows, to tell outside changes apart
        self._rendered_story_id: str | None = None
        self._rendered_results: tuple[str | None, str | None] = (None, None)

    @property
    def story(self) -> StoryState | None:
        """The story being edited."""
        return self.state.active_story

    def _notify(
        self,
        message: str,
        type: Literal["positive", "negative", "warning", "info", "ongoing"] = "info",
    ) -> None:
        """Display a UI notification and fall back to logging if not possible."""
        if self._client:
            with self._client:
                ui.notify(message, type=type)
        else:
            try:
                ui.notify(message, type=type)
            except RuntimeError:
                logger.warning("Could not show notification: %s", message)

    def _story_changed(self) -> None:
        if self.on_story_change:
            self.on_story_change()

    def build(self) -> None:
        """Build the editor page UI."""
        try:
            self._client = context.client
        except RuntimeError:
            logger.warning("Could not capture client context during build")

        self._container = ui.column().classes("w-full max-w-5xl mx-auto gap-4 p-4")
        with self._container:
            self._build_sections()

    def refresh(self) -> None:
        """Rebuild all sections, e.g. after the active story changed."""
        if self._container is None:
            return
        self._container.clear()
        with self._container:
            self._build_sections()

    def sync_with_store(self) -> None:
        """Catch up with commits made by another tab or a generation worker.

        A different active story rebuilds the whole form; new generation
        results of the shown story only redraw the results. Field edits from
        elsewhere are left alone so typing in this tab is never interrupted.
        """
        story = self.story
        story_id = story.id if story else None
        if story_id != self._rendered_story_id:
            logger.debug("Active story changed: %s -> %s", self._rendered_story_id, story_id)
            self.refresh()
        elif story is not None and _generation.results_of(story) != self._rendered_results:
            _generation.refresh_results(self)

    def _build_sections(self) -> None:
        story = self.story
        self._rendered_story_id = story.id if story else None
        if story is None:
            with ui.column().classes("w-full items-center py-16"):
                ui.icon("menu_book", size="xl").classes("text-gray-400")
                ui.label("Create a story from a folder in the sidebar.").classes("text-gray-500")
            return

        _fields.build_basic_section(self, story)
        _fields.build_setting_section(self, story)
        _fields.build_classification_section(self, story)
        _content.build_characters_section(self)
        _content.build_dialogs_section(self)
        _generation.build_results_section(self)

    # ========== Field Updates ==========

    def set_field(self, field: str, value: Any, notify_others: bool = False) -> None:
        """Write one story field of the active story.

        Args:
            field: StoryState field name.
            value: New value from the input.
            notify_others: Also refresh header and sidebar (titles).
        """
        story = self.story
        if story is None:
            return
        try:
            self.state.store.update_field(story.id, field, value)
        except ValueError as e:
            logger.warning("Rejected value for %s: %s", field, e)
            self._notify(f"Invalid value for {field.replace('_', ' ')}", "warning")
            return
        if notify_others:
            self._story_changed()

    # ========== Actions ==========

    def fill_example(self) -> None:
        """Overwrite the active story with the example story."""
        if self.state.store.fill_example() is None:
            return
        self.refresh()
        self._story_changed()
        self._notify("Example story loaded", "positive")

    async def generate(self) -> None:
        """Generate plot and narrative for the active story."""
        await _generation.generate(self)

    def next_chapter(self) -> None:
        """Start the next chapter of the active story."""
        _generation.next_chapter(self)


__all__ = ["EditorPage"]
