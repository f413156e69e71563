"""In-memory story store - folders, stories and the active-story pointer.

The store holds one immutable ``StoreSnapshot``. Every operation reads the
current snapshot, builds a new one and swaps it in under a lock, so a reader
never sees a half-applied change. Operations given an unknown id or blank
required input log at DEBUG and leave the snapshot unchanged.

Usage:
    store = StoryStore.with_defaults()
    store.add_character()
    store.update_field(store.active_story_id, "main_title", "Legenda")
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict

from src.memory.seed_data import (
    DEFAULT_FOLDERS,
    NEW_STORY_TITLE,
    apply_example,
    new_story,
)
from src.memory.story_state import (
    DEFAULT_CHARACTER_ROLE,
    GENDERS,
    Character,
    ClassificationUpdate,
    ContentUpdate,
    DialogItem,
    Folder,
    GenerationUpdate,
    StoryState,
    StoryUpdate,
    update_for_field,
)

logger = logging.getLogger(__name__)

# Fields of the nested records that may be edited (ids are stable)
CHARACTER_FIELDS = frozenset(name for name in Character.model_fields if name != "id")
DIALOG_FIELDS = frozenset(name for name in DialogItem.model_fields if name != "id")


def default_id_factory(prefix: str) -> str:
    """Generate a unique id such as ``story_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class StoreSnapshot(BaseModel):
    """The whole editor state at one point in time."""

    model_config = ConfigDict(frozen=True)

    folders: tuple[Folder, ...] = ()
    stories: tuple[StoryState, ...] = ()
    active_story_id: str | None = None


class StoryStore:
    """Owner of the folder and story collections.

    Consumers receive the store explicitly (the UI state holds a reference);
    there is no module-level instance.
    """

    def __init__(
        self,
        folders: Iterable[Folder] = DEFAULT_FOLDERS,
        id_factory: Callable[[str], str] = default_id_factory,
    ):
        """Create a store with the given folders and no stories.

        Args:
            folders: Initial folders.
            id_factory: Callable returning a fresh id for a prefix
                ("f", "story", "c", "d").
        """
        self._snapshot = StoreSnapshot(folders=tuple(folders))
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self._listeners: list[Callable[[StoreSnapshot], None]] = []

    @classmethod
    def with_defaults(cls, id_factory: Callable[[str], str] = default_id_factory) -> StoryStore:
        """Create a store from the seed folders and bootstrap its first story."""
        store = cls(DEFAULT_FOLDERS, id_factory=id_factory)
        store.bootstrap()
        return store

    # ========== Queries ==========

    @property
    def snapshot(self) -> StoreSnapshot:
        """Current immutable snapshot."""
        return self._snapshot

    @property
    def folders(self) -> tuple[Folder, ...]:
        """All folders in creation order."""
        return self._snapshot.folders

    @property
    def stories(self) -> tuple[StoryState, ...]:
        """All stories in creation order."""
        return self._snapshot.stories

    @property
    def active_story_id(self) -> str | None:
        """ID of the story targeted by edits and generation."""
        return self._snapshot.active_story_id

    @property
    def active_story(self) -> StoryState | None:
        """The active story, or None before bootstrap."""
        return self.get_story(self._snapshot.active_story_id)

    def get_story(self, story_id: str | None) -> StoryState | None:
        """Get a story by its ID.

        Args:
            story_id: Story ID to find.

        Returns:
            StoryState if found, None otherwise.
        """
        if story_id is None:
            return None
        for story in self._snapshot.stories:
            if story.id == story_id:
                return story
        return None

    def get_folder(self, folder_id: str) -> Folder | None:
        """Get a folder by its ID."""
        for folder in self._snapshot.folders:
            if folder.id == folder_id:
                return folder
        return None

    def stories_in_folder(self, folder_id: str) -> list[StoryState]:
        """Stories belonging to a folder, in creation order."""
        return [s for s in self._snapshot.stories if s.folder_id == folder_id]

    # ========== Change Notification ==========

    def on_change(self, callback: Callable[[StoreSnapshot], None]) -> None:
        """Register a callback run after every committed change.

        Args:
            callback: Function called with the new snapshot, on the thread that
                committed the change.
        """
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[StoreSnapshot], None]) -> None:
        """Unregister a change callback. Unknown callbacks are ignored."""
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def _commit(self, snapshot: StoreSnapshot, reason: str) -> None:
        """Swap in a new snapshot and notify listeners."""
        self._snapshot = snapshot
        logger.debug(
            "Store commit (%s): %d folders, %d stories, active=%s",
            reason,
            len(snapshot.folders),
            len(snapshot.stories),
            snapshot.active_story_id,
        )
        for listener in list(self._listeners):
            listener(snapshot)

    def _replace_story(self, snapshot: StoreSnapshot, updated: StoryState) -> StoreSnapshot:
        """Build a snapshot where the story with the same id is replaced."""
        stories = tuple(updated if s.id == updated.id else s for s in snapshot.stories)
        return snapshot.model_copy(update={"stories": stories})

    # ========== Folders & Stories ==========

    def bootstrap(self) -> StoryState | None:
        """Ensure there is an active story.

        Creates the default story in the first folder when the collection is
        empty. Selects the first story when stories exist but none is active.

        Returns:
            The active story, or None if there are no folders to place it in.
        """
        with self._lock:
            snapshot = self._snapshot
            if snapshot.stories:
                if self.get_story(snapshot.active_story_id) is None:
                    first = snapshot.stories[0]
                    self._commit(
                        snapshot.model_copy(update={"active_story_id": first.id}), "bootstrap"
                    )
                return self.active_story

            if not snapshot.folders:
                logger.warning("Cannot bootstrap a story: no folders exist")
                return None

            story = new_story(self._id_factory("story"), snapshot.folders[0].id)
            self._commit(
                snapshot.model_copy(update={"stories": (story,), "active_story_id": story.id}),
                "bootstrap",
            )
            logger.info("Bootstrapped default story %s", story.id)
            return story

    def add_folder(self, name: str | None) -> Folder | None:
        """Append a new folder.

        Args:
            name: Folder name. Blank or None (cancelled prompt) is a no-op.

        Returns:
            The new Folder, or None if nothing was added.
        """
        if not name or not name.strip():
            logger.debug("add_folder ignored: empty name")
            return None
        with self._lock:
            folder = Folder(id=self._id_factory("f"), name=name.strip())
            snapshot = self._snapshot
            self._commit(
                snapshot.model_copy(update={"folders": (*snapshot.folders, folder)}), "add_folder"
            )
            logger.info("Added folder %s (%s)", folder.name, folder.id)
            return folder

    def create_story(self, folder_id: str, main_title: str = NEW_STORY_TITLE) -> StoryState | None:
        """Create a story from the empty template in a folder and make it active.

        Args:
            folder_id: Folder to create the story in.
            main_title: Initial title of the story.

        Returns:
            The new story, or None if the folder does not exist.
        """
        with self._lock:
            if self.get_folder(folder_id) is None:
                logger.debug("create_story ignored: unknown folder %s", folder_id)
                return None
            story = new_story(self._id_factory("story"), folder_id, main_title=main_title)
            snapshot = self._snapshot
            self._commit(
                snapshot.model_copy(
                    update={"stories": (*snapshot.stories, story), "active_story_id": story.id}
                ),
                "create_story",
            )
            logger.info("Created story %s in folder %s", story.id, folder_id)
            return story

    def select_story(self, story_id: str) -> StoryState | None:
        """Make a story the active one.

        Args:
            story_id: Story to activate. Unknown ids are a no-op.

        Returns:
            The now-active story, or None if the id is unknown.
        """
        with self._lock:
            story = self.get_story(story_id)
            if story is None:
                logger.debug("select_story ignored: unknown story %s", story_id)
                return None
            if self._snapshot.active_story_id != story_id:
                self._commit(
                    self._snapshot.model_copy(update={"active_story_id": story_id}),
                    "select_story",
                )
            return story

    # ========== Field Updates ==========

    def update_story(self, story_id: str | None, update: StoryUpdate) -> tuple[StoryState, ...]:
        """Apply a typed update to one story.

        Args:
            story_id: Target story. Unknown ids leave the collection unchanged.
            update: Field-group update to apply.

        Returns:
            The (possibly unchanged) story collection.
        """
        with self._lock:
            snapshot = self._snapshot
            story = self.get_story(story_id)
            if story is None:
                logger.debug("update_story ignored: unknown story %s", story_id)
                return snapshot.stories
            updated = story.apply(update)
            if updated is story:
                return snapshot.stories
            self._commit(self._replace_story(snapshot, updated), f"update:{update.kind}")
            return self._snapshot.stories

    def update_field(self, story_id: str | None, field: str, value: Any) -> tuple[StoryState, ...]:
        """Set a single story field.

        Args:
            story_id: Target story. Unknown ids leave the collection unchanged.
            field: StoryState field name.
            value: New value.

        Returns:
            The (possibly unchanged) story collection.

        Raises:
            ValueError: If the field is unknown, not updatable, or the value invalid.
        """
        return self.update_story(story_id, update_for_field(field, value))

    def update_active(self, update: StoryUpdate) -> tuple[StoryState, ...]:
        """Apply a typed update to the active story."""
        return self.update_story(self._snapshot.active_story_id, update)

    # ========== Characters ==========

    def add_character(self) -> Character | None:
        """Append a blank character to the active story.

        Returns:
            The new Character, or None if there is no active story.
        """
        with self._lock:
            story = self.active_story
            if story is None:
                logger.debug("add_character ignored: no active story")
                return None
            character = Character(
                id=self._id_factory("c"),
                name="",
                gender=GENDERS[0],
                age="",
                age_description="",
                role=DEFAULT_CHARACTER_ROLE,
            )
            self.update_story(story.id, ContentUpdate(characters=[*story.characters, character]))
            return character

    def update_character(self, character_id: str, field: str, value: str) -> Character | None:
        """Set one field of a character of the active story.

        Args:
            character_id: Character to edit. Unknown ids are a no-op.
            field: Character field name (not "id").
            value: New value.

        Returns:
            The updated Character, or None if nothing matched.

        Raises:
            ValueError: If the field name is not an editable Character field.
        """
        if field not in CHARACTER_FIELDS:
            raise ValueError(f"Character field '{field}' is unknown or cannot be updated")
        with self._lock:
            story = self.active_story
            if story is None or story.get_character(character_id) is None:
                logger.debug("update_character ignored: unknown character %s", character_id)
                return None
            updated: Character | None = None
            characters = []
            for character in story.characters:
                if character.id == character_id:
                    character = character.model_copy(update={field: value})
                    updated = character
                characters.append(character)
            self.update_story(story.id, ContentUpdate(characters=characters))
            return updated

    def remove_character(self, character_id: str) -> bool:
        """Remove a character from the active story.

        Dialog lines spoken by the character keep their speaker text.

        Args:
            character_id: Character to remove. Unknown ids are a no-op.

        Returns:
            True if a character was removed.
        """
        with self._lock:
            story = self.active_story
            if story is None or story.get_character(character_id) is None:
                logger.debug("remove_character ignored: unknown character %s", character_id)
                return False
            characters = [c for c in story.characters if c.id != character_id]
            self.update_story(story.id, ContentUpdate(characters=characters))
            return True

    # ========== Dialogs ==========

    def add_dialog(self) -> DialogItem | None:
        """Append a dialog line to the active story.

        The speaker defaults to the first character's name, or "" when the
        story has no characters.

        Returns:
            The new DialogItem, or None if there is no active story.
        """
        with self._lock:
            story = self.active_story
            if story is None:
                logger.debug("add_dialog ignored: no active story")
                return None
            speaker = story.characters[0].name if story.characters else ""
            dialog = DialogItem(
                id=self._id_factory("d"),
                speaker=speaker,
                mood="",
                body_condition="",
                text="",
                description="",
            )
            self.update_story(story.id, ContentUpdate(dialogs=[*story.dialogs, dialog]))
            return dialog

    def update_dialog(self, dialog_id: str, field: str, value: str) -> DialogItem | None:
        """Set one field of a dialog line of the active story.

        Args:
            dialog_id: Dialog line to edit. Unknown ids are a no-op.
            field: DialogItem field name (not "id").
            value: New value.

        Returns:
            The updated DialogItem, or None if nothing matched.

        Raises:
            ValueError: If the field name is not an editable DialogItem field.
        """
        if field not in DIALOG_FIELDS:
            raise ValueError(f"Dialog field '{field}' is unknown or cannot be updated")
        with self._lock:
            story = self.active_story
            if story is None or story.get_dialog(dialog_id) is None:
                logger.debug("update_dialog ignored: unknown dialog %s", dialog_id)
                return None
            updated: DialogItem | None = None
            dialogs = []
            for dialog in story.dialogs:
                if dialog.id == dialog_id:
                    dialog = dialog.model_copy(update={field: value})
                    updated = dialog
                dialogs.append(dialog)
            self.update_story(story.id, ContentUpdate(dialogs=dialogs))
            return updated

    def remove_dialog(self, dialog_id: str) -> bool:
        """Remove a dialog line from the active story.

        Args:
            dialog_id: Dialog line to remove. Unknown ids are a no-op.

        Returns:
            True if a line was removed.
        """
        with self._lock:
            story = self.active_story
            if story is None or story.get_dialog(dialog_id) is None:
                logger.debug("remove_dialog ignored: unknown dialog %s", dialog_id)
                return False
            dialogs = [d for d in story.dialogs if d.id != dialog_id]
            self.update_story(story.id, ContentUpdate(dialogs=dialogs))
            return True

    # ========== Classification ==========

    def toggle_genre(self, genre: str) -> list[str]:
        """Add the genre to the active story, or remove it if already present.

        Args:
            genre: Genre name; any text is accepted.

        Returns:
            The resulting genre list (empty if there is no active story).
        """
        with self._lock:
            story = self.active_story
            if story is None or not genre.strip():
                logger.debug("toggle_genre ignored: genre=%r, active=%s", genre, story)
                return list(story.genres) if story else []
            if genre in story.genres:
                genres = [g for g in story.genres if g != genre]
            else:
                genres = [*story.genres, genre]
            self.update_active(ClassificationUpdate(genres=genres))
            return genres

    # ========== Actions ==========

    def fill_example(self) -> StoryState | None:
        """Overwrite the active story's content with the example story.

        ``id`` and ``folder_id`` of the active story are preserved.

        Returns:
            The updated story, or None if there is no active story.
        """
        with self._lock:
            story = self.active_story
            if story is None:
                logger.debug("fill_example ignored: no active story")
                return None
            filled = apply_example(story)
            self._commit(self._replace_story(self._snapshot, filled), "fill_example")
            logger.info("Filled story %s with the example story", story.id)
            return filled

    def advance_chapter(self) -> StoryState | None:
        """Start the next chapter as a new story and make it active.

        The new story keeps titles, characters, setting, language and genres;
        chapter title, dialogs and generation results are reset and the
        chapter number is incremented. The source story is not modified.

        Returns:
            The new chapter story, or None if there is no active story.
        """
        with self._lock:
            source = self.active_story
            if source is None:
                logger.debug("advance_chapter ignored: no active story")
                return None
            chapter = source.model_copy(
                update={
                    "id": self._id_factory("story"),
                    "chapter_number": source.chapter_number + 1,
                    "chapter_title": "",
                    "characters": source.characters,
                    "genres": source.genres,
                    "dialogs": (),
                    "generated_json": None,
                    "generated_content": None,
                }
            )
            snapshot = self._snapshot
            self._commit(
                snapshot.model_copy(
                    update={"stories": (*snapshot.stories, chapter), "active_story_id": chapter.id}
                ),
                "advance_chapter",
            )
            logger.info(
                "Advanced %s (%s) to %s as story %s",
                source.id,
                source.summary_line(),
                chapter.summary_line(),
                chapter.id,
            )
            return chapter

    # ========== Generation Write-back ==========

    def record_plot(self, story_id: str, plot_json: str) -> tuple[StoryState, ...]:
        """Store the plot outline on a story (by id, not the active pointer)."""
        return self.update_story(story_id, GenerationUpdate(generated_json=plot_json))

    def record_narrative(self, story_id: str, narrative: str) -> tuple[StoryState, ...]:
        """Store the narrative on a story (by id, not the active pointer)."""
        return self.update_story(story_id, GenerationUpdate(generated_content=narrative))
