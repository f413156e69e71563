"""Character and dialog list editors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nicegui import ui

from src.memory.story_state import CHARACTER_ROLES, GENDERS, Character, DialogItem

from ._fields import options_with, section_card

if TYPE_CHECKING:
    from . import EditorPage

logger = logging.getLogger(__name__)


# ========== Characters ==========


def build_characters_section(page: EditorPage) -> None:
    """Build the characters card with its list container.

    Args:
        page: The EditorPage instance.
    """
    with section_card("Characters", "groups"):
        page._characters_container = ui.column().classes("w-full gap-2")
        with page._characters_container:
            build_character_list(page)
        ui.button("Add Character", icon="person_add", on_click=lambda: add_character(page)).props(
            "outline"
        )


def build_character_list(page: EditorPage) -> None:
    """Build one card per character of the active story.

    Args:
        page: The EditorPage instance.
    """
    story = page.story
    if story is None or not story.characters:
        ui.label("No characters yet.").classes("text-gray-400 text-sm")
        return
    for character in story.characters:
        _build_character_card(page, character)


def _build_character_card(page: EditorPage, character: Character) -> None:
    cid = character.id
    with ui.card().classes("w-full").props("flat bordered"):
        with ui.row().classes("w-full items-start gap-2"):
            ui.input(
                "Name",
                value=character.name,
                on_change=lambda e: _set_character_name(page, cid, e.value),
            ).classes("flex-1 min-w-[160px]")
            ui.select(
                options_with(GENDERS, character.gender),
                label="Gender",
                value=character.gender or None,
                with_input=True,
                new_value_mode="add-unique",
                on_change=lambda e: page.state.store.update_character(
                    cid, "gender", e.value or ""
                ),
            ).classes("w-40")
            ui.input(
                "Age",
                value=character.age,
                on_change=lambda e: page.state.store.update_character(cid, "age", e.value),
            ).classes("w-20")
            ui.select(
                options_with(CHARACTER_ROLES, character.role),
                label="Role",
                value=character.role or None,
                with_input=True,
                new_value_mode="add-unique",
                on_change=lambda e: page.state.store.update_character(cid, "role", e.value or ""),
            ).classes("w-40")
            ui.button(icon="delete", on_click=lambda: remove_character(page, cid)).props(
                "flat round color=negative"
            ).tooltip("Remove character")
        ui.textarea(
            "Appearance",
            value=character.age_description,
            on_change=lambda e: page.state.store.update_character(
                cid, "age_description", e.value
            ),
        ).classes("w-full").props("autogrow")


def _set_character_name(page: EditorPage, character_id: str, name: str) -> None:
    """Rename a character; existing dialog speakers keep the old name."""
    page.state.store.update_character(character_id, "name", name or "")
    # Speaker options come from character names
    refresh_dialogs(page)


def add_character(page: EditorPage) -> None:
    """Append a blank character and redraw the list.

    Args:
        page: The EditorPage instance.
    """
    character = page.state.store.add_character()
    if character is None:
        return
    logger.debug("Added character %s", character.id)
    refresh_characters(page)
    refresh_dialogs(page)


def remove_character(page: EditorPage, character_id: str) -> None:
    """Remove a character and redraw the list.

    Args:
        page: The EditorPage instance.
        character_id: Character to remove.
    """
    if page.state.store.remove_character(character_id):
        refresh_characters(page)
        refresh_dialogs(page)


def refresh_characters(page: EditorPage) -> None:
    """Redraw the character list.

    Args:
        page: The EditorPage instance.
    """
    if page._characters_container is None:
        return
    page._characters_container.clear()
    with page._characters_container:
        build_character_list(page)


# ========== Dialogs ==========


def build_dialogs_section(page: EditorPage) -> None:
    """Build the dialogs card with its list container.

    Args:
        page: The EditorPage instance.
    """
    with section_card("Dialogs", "forum"):
        page._dialogs_container = ui.column().classes("w-full gap-2")
        with page._dialogs_container:
            build_dialog_list(page)
        ui.button("Add Dialog", icon="add_comment", on_click=lambda: add_dialog(page)).props(
            "outline"
        )


def build_dialog_list(page: EditorPage) -> None:
    """Build one card per dialog line of the active story.

    Args:
        page: The EditorPage instance.
    """
    story = page.story
    if story is None or not story.dialogs:
        ui.label("No dialog lines yet.").classes("text-gray-400 text-sm")
        return
    for index, dialog in enumerate(story.dialogs, start=1):
        _build_dialog_card(page, dialog, index, story.character_names)


def _build_dialog_card(
    page: EditorPage, dialog: DialogItem, index: int, speakers: list[str]
) -> None:
    did = dialog.id
    store = page.state.store
    with ui.card().classes("w-full").props("flat bordered"):
        with ui.row().classes("w-full items-start gap-2"):
            ui.label(f"#{index}").classes("text-gray-500 pt-4")
            ui.select(
                options_with(speakers, dialog.speaker),
                label="Speaker",
                value=dialog.speaker or None,
                with_input=True,
                new_value_mode="add-unique",
                on_change=lambda e: store.update_dialog(did, "speaker", e.value or ""),
            ).classes("w-44")
            ui.input(
                "Mood",
                value=dialog.mood,
                on_change=lambda e: store.update_dialog(did, "mood", e.value),
            ).classes("w-36")
            ui.input(
                "Body Condition",
                value=dialog.body_condition,
                on_change=lambda e: store.update_dialog(did, "body_condition", e.value),
            ).classes("flex-1 min-w-[160px]")
            ui.button(icon="delete", on_click=lambda: remove_dialog(page, did)).props(
                "flat round color=negative"
            ).tooltip("Remove dialog")
        ui.textarea(
            "Dialog",
            value=dialog.text,
            on_change=lambda e: store.update_dialog(did, "text", e.value),
        ).classes("w-full").props("autogrow")
        ui.input(
            "Scene Description",
            value=dialog.description,
            on_change=lambda e: store.update_dialog(did, "description", e.value),
        ).classes("w-full")


def add_dialog(page: EditorPage) -> None:
    """Append a dialog line and redraw the list.

    Args:
        page: The EditorPage instance.
    """
    if page.state.store.add_dialog() is not None:
        refresh_dialogs(page)


def remove_dialog(page: EditorPage, dialog_id: str) -> None:
    """Remove a dialog line and redraw the list.

    Args:
        page: The EditorPage instance.
        dialog_id: Dialog line to remove.
    """
    if page.state.store.remove_dialog(dialog_id):
        refresh_dialogs(page)


def refresh_dialogs(page: EditorPage) -> None:
    """Redraw the dialog list.

    Args:
        page: The EditorPage instance.
    """
    if page._dialogs_container is None:
        return
    page._dialogs_container.clear()
    with page._dialogs_container:
        build_dialog_list(page)
