"""Basic information, setting and classification sections."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from nicegui import ui

from src.memory.story_state import GENRES, LANGUAGES, StoryState

if TYPE_CHECKING:
    from . import EditorPage

logger = logging.getLogger(__name__)


def options_with(options: list[str], current: str) -> list[str]:
    """Select options that also contain a custom current value.

    NiceGUI rejects a select value missing from its options, and story
    content is free text, so the current value is appended when needed.
    """
    if current and current not in options:
        return [*options, current]
    return list(options)


def section_card(title: str, icon: str) -> ui.card:
    """Open a titled card for one editor section."""
    card = ui.card().classes("w-full")
    with card:
        with ui.row().classes("items-center gap-2"):
            ui.icon(icon).classes("text-primary")
            ui.label(title).classes("text-lg font-semibold")
    return card


def build_basic_section(page: EditorPage, story: StoryState) -> None:
    """Build the title and chapter inputs.

    Args:
        page: The EditorPage instance.
        story: Story being edited.
    """
    with section_card("Basic Information", "info"):
        ui.input(
            "Main Title",
            value=story.main_title,
            on_change=lambda e: page.set_field("main_title", e.value, notify_others=True),
        ).classes("w-full")
        with ui.row().classes("w-full gap-4 no-wrap"):
            ui.input("Chapter", value=str(story.chapter_number)).props("readonly").classes("w-24")
            ui.input(
                "Chapter Title",
                value=story.chapter_title,
                on_change=lambda e: page.set_field("chapter_title", e.value, notify_others=True),
            ).classes("flex-grow")


def build_setting_section(page: EditorPage, story: StoryState) -> None:
    """Build the environment and location inputs.

    Args:
        page: The EditorPage instance.
        story: Story being edited.
    """
    with section_card("Setting", "landscape"):
        with ui.row().classes("w-full gap-4"):
            with ui.column().classes("flex-1 min-w-[280px]"):
                ui.input(
                    "Environment",
                    value=story.environment,
                    on_change=lambda e: page.set_field("environment", e.value),
                ).classes("w-full")
                ui.textarea(
                    "Environment Description",
                    value=story.environment_desc,
                    on_change=lambda e: page.set_field("environment_desc", e.value),
                ).classes("w-full").props("autogrow")
            with ui.column().classes("flex-1 min-w-[280px]"):
                ui.input(
                    "Location",
                    value=story.location,
                    on_change=lambda e: page.set_field("location", e.value),
                ).classes("w-full")
                ui.textarea(
                    "Location Description",
                    value=story.location_desc,
                    on_change=lambda e: page.set_field("location_desc", e.value),
                ).classes("w-full").props("autogrow")


def build_classification_section(page: EditorPage, story: StoryState) -> None:
    """Build language, genres and genre description.

    Args:
        page: The EditorPage instance.
        story: Story being edited.
    """
    with section_card("Classification", "category"):
        ui.select(
            options_with(LANGUAGES, story.language),
            label="Language",
            value=story.language or None,
            with_input=True,
            new_value_mode="add-unique",
            on_change=lambda e: page.set_field("language", e.value or ""),
        ).classes("w-72")

        ui.label("Genres").classes("text-sm text-gray-500 mt-2")
        page._genre_container = ui.column().classes("w-full")
        with page._genre_container:
            build_genre_chips(page)

        ui.textarea(
            "Genre Description",
            value=story.genre_desc,
            on_change=lambda e: page.set_field("genre_desc", e.value),
        ).classes("w-full").props("autogrow")


def build_genre_chips(page: EditorPage) -> None:
    """Build the genre toggle chips and the custom genre input.

    Args:
        page: The EditorPage instance.
    """
    story = page.story
    if story is None:
        return

    custom = [g for g in story.genres if g not in GENRES]
    with ui.row().classes("flex-wrap gap-1"):
        for genre in [*GENRES, *custom]:
            selected = genre in story.genres
            ui.chip(
                genre,
                color="primary" if selected else "grey-4",
                text_color="white" if selected else "black",
                on_click=lambda _, g=genre: toggle_genre(page, g),
            ).props("clickable")

    with ui.row().classes("items-center gap-2"):
        custom_input = ui.input(placeholder="Custom genre").props("dense").classes("w-48")

        def add_custom(_: Any = None) -> None:
            value = (custom_input.value or "").strip()
            if not value:
                return
            current = page.story
            if current is not None and value in current.genres:
                page._notify(f"Genre '{value}' is already selected", "info")
                return
            toggle_genre(page, value)

        custom_input.on("keydown.enter", add_custom)
        ui.button(icon="add", on_click=add_custom).props("flat round dense")


def toggle_genre(page: EditorPage, genre: str) -> None:
    """Toggle one genre on the active story and redraw the chips.

    Args:
        page: The EditorPage instance.
        genre: Genre to add or remove.
    """
    genres = page.state.store.toggle_genre(genre)
    logger.debug("Genres now: %s", genres)
    refresh_genres(page)


def refresh_genres(page: EditorPage) -> None:
    """Redraw the genre chips after a change.

    Args:
        page: The EditorPage instance.
    """
    if page._genre_container is None:
        return
    page._genre_container.clear()
    with page._genre_container:
        build_genre_chips(page)
