"""Centralized UI state management."""

import logging
import threading
from dataclasses import dataclass, field

from src.memory.story_state import StoryState
from src.memory.story_store import StoreSnapshot, StoryStore

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Centralized UI state.

    Holds the story store plus the view flags that are not story data:
    sidebar visibility, theme, and which stories have a generation in flight.

    Usage:
        state = AppState(store=StoryStore.with_defaults())
        if state.begin_generation(story_id):
            try:
                ...
            finally:
                state.end_generation(story_id)
    """

    store: StoryStore = field(default_factory=StoryStore.with_defaults)

    # ========== View Flags ==========
    sidebar_open: bool = True
    dark_mode: bool = False

    # ========== Generation Tracking ==========
    _generating: set[str] = field(default_factory=set)
    _generation_lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def active_story(self) -> StoryState | None:
        """The story targeted by edits and generation."""
        return self.store.active_story

    def begin_generation(self, story_id: str) -> bool:
        """Mark a generation for a story as in flight.

        Args:
            story_id: Story about to be generated.

        Returns:
            False if a generation for this story is already running.
        """
        with self._generation_lock:
            if story_id in self._generating:
                logger.warning("Generation already running for story %s", story_id)
                return False
            self._generating.add(story_id)
            logger.debug("Generation started: %s (active: %d)", story_id, len(self._generating))
        return True

    def end_generation(self, story_id: str) -> None:
        """Clear the in-flight mark of a story. Unknown ids are ignored."""
        with self._generation_lock:
            if story_id not in self._generating:
                logger.debug("end_generation for idle story %s", story_id)
                return
            self._generating.discard(story_id)
            logger.debug("Generation ended: %s (active: %d)", story_id, len(self._generating))

    def is_generating(self, story_id: str | None) -> bool:
        """Check whether a story has a generation in flight."""
        with self._generation_lock:
            return story_id in self._generating

    @property
    def is_busy(self) -> bool:
        """Check if any generation is running."""
        with self._generation_lock:
            return bool(self._generating)

    def toggle_sidebar(self) -> bool:
        """Flip sidebar visibility and return the new value."""
        self.sidebar_open = not self.sidebar_open
        return self.sidebar_open



class StoreWatcher:
    """Flags store commits for one browser tab.

    The store calls the listener on whichever thread committed (a NiceGUI
    worker during generation), so the listener only sets an event. The page
    polls ``take_change`` from a ``ui.timer`` on its own event loop and
    redraws there.
    """

    def __init__(self, store: StoryStore):
        """Register on the store.

        Args:
            store: Store shared by every tab.
        """
        self.store = store
        self._changed = threading.Event()
        store.on_change(self._on_commit)

    def _on_commit(self, _snapshot: StoreSnapshot) -> None:
        self._changed.set()

    def take_change(self) -> bool:
        """Return True once for every batch of commits since the last call."""
        if not self._changed.is_set():
            return False
        self._changed.clear()
        return True

    def close(self) -> None:
        """Stop listening, e.g. when the tab disconnects."""
        self.store.remove_listener(self._on_commit)
        logger.debug("Store watcher closed")
