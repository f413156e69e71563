"""Header component with breadcrumb, story actions and Ollama status."""

import logging
from collections.abc import Awaitable, Callable

from nicegui import run, ui
from nicegui.elements.button import Button
from nicegui.elements.label import Label

from src.services import ServiceContainer
from src.ui.state import AppState

logger = logging.getLogger(__name__)


class Header:
    """Application header with sidebar toggle, breadcrumb, actions and status."""

    def __init__(
        self,
        state: AppState,
        services: ServiceContainer,
        on_toggle_sidebar: Callable[[], None],
        on_fill_example: Callable[[], None],
        on_generate: Callable[[], Awaitable[None]],
    ):
        """Initialize header.

        Args:
            state: Application state.
            services: Service container (health check).
            on_toggle_sidebar: Opens or closes the folder drawer.
            on_fill_example: Loads the example story into the active story.
            on_generate: Runs plot & story generation for the active story.
        """
        self.state = state
        self.services = services
        self._on_toggle_sidebar = on_toggle_sidebar
        self._on_fill_example = on_fill_example
        self._on_generate = on_generate
        self._breadcrumb: Label | None = None
        self._generate_btn: Button | None = None
        self._fill_btn: Button | None = None
        self._status_label: Label | None = None

    def build(self) -> None:
        """Build the header UI."""
        bg_color = "#1f2937"
        with ui.header().classes("shadow-sm items-center").style(f"background-color: {bg_color}"):
            with ui.row().classes("w-full items-center gap-2 px-4 py-2 no-wrap"):
                ui.button(icon="menu", on_click=self._on_toggle_sidebar).props(
                    "flat round color=white"
                )
                ui.icon("auto_stories", size="md").classes("text-blue-400")
                ui.label("NusaCerita").classes("text-xl font-bold mr-2")
                self._breadcrumb = ui.label().classes("text-sm text-gray-300 truncate")

                ui.space()

                self._fill_btn = ui.button(
                    "Fill Example", icon="auto_fix_high", on_click=self._on_fill_example
                ).props("flat color=white")
                self._generate_btn = ui.button(
                    "Generate Plot & Story", icon="bolt", on_click=self._on_generate
                ).props("color=primary")

                with ui.row().classes("items-center gap-1"):
                    self._status_label = ui.label("Checking...").classes("text-xs text-gray-400")

        self.refresh()
        ui.timer(0.5, self.refresh_status, once=True)

    def breadcrumb_text(self) -> str:
        """Text of the active story breadcrumb."""
        story = self.state.active_story
        if story is None:
            return "No story selected"
        return f"{story.main_title or '(Untitled)'} / Chapter {story.chapter_number}"

    def refresh(self) -> None:
        """Update breadcrumb and buttons from the active story."""
        story = self.state.active_story
        if self._breadcrumb:
            self._breadcrumb.text = self.breadcrumb_text()

        generating = story is not None and self.state.is_generating(story.id)
        if self._generate_btn:
            if generating:
                self._generate_btn.text = "Generating..."
                self._generate_btn.disable()
            else:
                self._generate_btn.text = "Generate Plot & Story"
                if story is None:
                    self._generate_btn.disable()
                else:
                    self._generate_btn.enable()
        if self._fill_btn:
            if story is None or generating:
                self._fill_btn.disable()
            else:
                self._fill_btn.enable()

    async def refresh_status(self) -> None:
        """Refresh the Ollama status display."""
        healthy, message = await run.io_bound(self.services.generation.check_health)
        if self._status_label is None:
            return
        if healthy:
            self._status_label.text = self.services.settings.model
            self._status_label.classes(replace="text-xs text-green-400")
        else:
            self._status_label.text = "Offline"
            self._status_label.classes(replace="text-xs text-red-400")
        self._status_label.tooltip(message)
