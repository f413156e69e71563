"""Folder sidebar - folders, their stories and story creation."""

import logging
from collections.abc import Callable

from nicegui import ui
from nicegui.elements.drawer import LeftDrawer

from src.memory.story_state import Folder, StoryState
from src.ui.state import AppState

logger = logging.getLogger(__name__)


def story_label(story: StoryState) -> tuple[str, str]:
    """Title line and chapter line shown for a story entry."""
    return (
        story.main_title or "(Untitled)",
        f"Ch.{story.chapter_number} : {story.chapter_title or '...'}",
    )


class FolderSidebar:
    """Left drawer listing folders with their stories."""

    def __init__(self, state: AppState, on_select: Callable[[], None] | None = None):
        """Initialize the sidebar.

        Args:
            state: Application state.
            on_select: Called after the active story changed from the sidebar.
        """
        self.state = state
        self.on_select = on_select
        self._drawer: LeftDrawer | None = None
        self._container: ui.column | None = None

    def build(self) -> None:
        """Build the drawer UI."""
        self._drawer = ui.left_drawer(value=self.state.sidebar_open).classes("bg-gray-50 p-2")
        with self._drawer:
            with ui.row().classes("w-full items-center justify-between px-2"):
                ui.label("Folders").classes("text-lg font-semibold")
                ui.button(icon="create_new_folder", on_click=self._open_add_folder_dialog).props(
                    "flat round dense"
                ).tooltip("New folder")
            self._container = ui.column().classes("w-full gap-1")
            with self._container:
                self._build_folders()

    def toggle(self) -> None:
        """Open or close the drawer."""
        open_now = self.state.toggle_sidebar()
        if self._drawer:
            self._drawer.set_value(open_now)

    def refresh(self) -> None:
        """Rebuild the folder list."""
        if self._container is None:
            return
        self._container.clear()
        with self._container:
            self._build_folders()

    def _build_folders(self) -> None:
        store = self.state.store
        for folder in store.folders:
            self._build_folder(folder, store.stories_in_folder(folder.id))

    def _build_folder(self, folder: Folder, stories: list[StoryState]) -> None:
        active_id = self.state.store.active_story_id
        with ui.expansion(folder.name, icon="folder", value=True).classes("w-full"):
            for story in stories:
                title, chapter = story_label(story)
                is_active = story.id == active_id
                classes = "bg-blue-100 text-blue-800" if is_active else "hover:bg-gray-200"
                with (
                    ui.item(on_click=lambda _, sid=story.id: self.select_story(sid))
                    .classes(f"w-full rounded {classes}")
                    .props("dense clickable")
                ):
                    with ui.item_section():
                        ui.item_label(title).classes("font-medium")
                        ui.item_label(chapter).props("caption")
            ui.button(
                "New Story",
                icon="add",
                on_click=lambda _, fid=folder.id: self.create_story(fid),
            ).props("flat dense size=sm")

    # ========== Actions ==========

    def select_story(self, story_id: str) -> None:
        """Activate a story and notify listeners.

        Args:
            story_id: Story to activate.
        """
        if self.state.store.select_story(story_id) is None:
            return
        self.refresh()
        if self.on_select:
            self.on_select()

    def create_story(self, folder_id: str) -> None:
        """Create a new story in a folder and activate it.

        Args:
            folder_id: Folder to create the story in.
        """
        story = self.state.store.create_story(folder_id)
        if story is None:
            ui.notify("Folder not found", type="warning")
            return
        self.refresh()
        if self.on_select:
            self.on_select()

    def add_folder(self, name: str | None) -> None:
        """Add a folder by name; blank names are ignored.

        Args:
            name: Folder name from the dialog.
        """
        folder = self.state.store.add_folder(name)
        if folder is None:
            return
        self.refresh()
        ui.notify(f"Folder '{folder.name}' created", type="positive")

    def _open_add_folder_dialog(self) -> None:
        with ui.dialog() as dialog, ui.card().classes("w-80"):
            ui.label("New Folder").classes("text-lg font-semibold")
            name_input = ui.input("Folder name").classes("w-full")

            def submit() -> None:
                dialog.close()
                self.add_folder(name_input.value)

            name_input.on("keydown.enter", submit)
            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=dialog.close).props("flat")
                ui.button("Create", on_click=submit)
        dialog.open()
