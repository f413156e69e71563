"""Plot & story generation, results display and next chapter."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nicegui import run, ui

from src.memory.story_state import StoryState
from src.services.generation_service import parse_plot
from src.utils.exceptions import GenerationError

from ._fields import section_card

if TYPE_CHECKING:
    from . import EditorPage

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate the story. Please try again."


async def generate(page: EditorPage) -> None:
    """Run the plot then narrative pipeline for the active story.

    The story id is taken once here; switching stories while the call runs
    does not redirect the results.

    Args:
        page: The EditorPage instance.
    """
    story = page.story
    if story is None:
        return
    story_id = story.id

    if not page.state.begin_generation(story_id):
        page._notify("Generation is already running for this story", "warning")
        return

    page._story_changed()
    refresh_results(page)
    try:
        await run.io_bound(page.services.story.generate, page.state.store, story_id)
        page._notify("Plot and story generated", "positive")
    except GenerationError:
        logger.exception("Generation failed for story %s", story_id)
        page._notify(GENERATION_FAILED_MESSAGE, "negative")
    finally:
        page.state.end_generation(story_id)
        page._story_changed()
        refresh_results(page)


def next_chapter(page: EditorPage) -> None:
    """Advance the active story to a new chapter and show it.

    Args:
        page: The EditorPage instance.
    """
    chapter = page.state.store.advance_chapter()
    if chapter is None:
        return
    page.refresh()
    page._story_changed()
    page._notify(f"Moved to Chapter {chapter.chapter_number}", "positive")


def build_results_section(page: EditorPage) -> None:
    """Build the results card with its container and the next chapter button.

    Args:
        page: The EditorPage instance.
    """
    with section_card("Results", "auto_stories"):
        page._results_container = ui.column().classes("w-full gap-2")
        with page._results_container:
            build_results(page)
        with ui.row().classes("w-full justify-end"):
            ui.button(
                "Next Chapter", icon="skip_next", on_click=lambda: next_chapter(page)
            ).props("color=secondary")


def build_results(page: EditorPage) -> None:
    """Show the plot outline and narrative of the active story.

    Args:
        page: The EditorPage instance.
    """
    story = page.story
    if story is None:
        return
    page._rendered_results = results_of(story)

    if page.state.is_generating(story.id):
        with ui.row().classes("items-center gap-2"):
            ui.spinner(size="md")
            ui.label("Generating plot and story...").classes("text-gray-500")

    ui.label("Plot Outline").classes("text-md font-semibold")
    if story.generated_json is None:
        ui.label("No plot generated yet.").classes("text-gray-400 text-sm")
    else:
        outline = parse_plot(story.generated_json)
        if outline is not None and outline.beats:
            with ui.column().classes("w-full gap-1"):
                if outline.synopsis:
                    ui.label(outline.synopsis).classes("italic")
                for beat in outline.beats:
                    ui.label(f"{beat.order}. {beat.summary}").classes("text-sm")
        with ui.expansion("JSON", icon="data_object").classes("w-full"):
            ui.code(story.generated_json, language="json").classes("w-full")

    ui.label("Story").classes("text-md font-semibold mt-2")
    if story.generated_content is None:
        ui.label("No story generated yet.").classes("text-gray-400 text-sm")
    else:
        ui.label(story.generated_content).classes("whitespace-pre-wrap leading-relaxed")


def results_of(story: StoryState) -> tuple[str | None, str | None]:
    """Generation results of a story, as shown in the results card."""
    return story.generated_json, story.generated_content


def refresh_results(page: EditorPage) -> None:
    """Redraw the results after generation state changed.

    Args:
        page: The EditorPage instance.
    """
    if page._results_container is None:
        return
    page._results_container.clear()
    with page._results_container:
        build_results(page)
