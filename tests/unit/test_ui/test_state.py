"""Tests for AppState."""

import threading

from src.ui.state import AppState, StoreWatcher


class TestAppState:
    """Tests for the UI state container."""

    def test_default_store_has_active_story(self):
        """A fresh state wraps a bootstrapped store."""
        state = AppState()
        assert state.active_story is not None
        assert state.active_story is state.store.active_story

    def test_toggle_sidebar(self, store):
        """toggle_sidebar flips and returns the flag."""
        state = AppState(store=store)
        assert state.toggle_sidebar() is False
        assert state.toggle_sidebar() is True


class TestGenerationTracking:
    """Tests for in-flight generation tracking."""

    def test_begin_and_end(self, store):
        """A story is generating between begin and end."""
        state = AppState(store=store)

        assert state.begin_generation("story_1") is True
        assert state.is_generating("story_1") is True
        assert state.is_busy is True

        state.end_generation("story_1")

        assert state.is_generating("story_1") is False
        assert state.is_busy is False

    def test_second_begin_is_refused(self, store):
        """A story cannot have two generations in flight."""
        state = AppState(store=store)
        state.begin_generation("story_1")

        assert state.begin_generation("story_1") is False

    def test_other_stories_can_generate(self, store):
        """Generations for different stories run side by side."""
        state = AppState(store=store)
        state.begin_generation("story_1")

        assert state.begin_generation("story_2") is True
        assert state.is_generating("story_2") is True

    def test_end_unknown_is_ignored(self, store):
        """Ending an idle story does nothing."""
        state = AppState(store=store)
        state.end_generation("story_1")
        assert state.is_busy is False

    def test_none_is_never_generating(self, store):
        """No active story means nothing is generating."""
        assert AppState(store=store).is_generating(None) is False


class TestStoreWatcher:
    """Tests for the per-tab store watcher."""

    def test_no_change_until_commit(self, store):
        """A fresh watcher has nothing to report."""
        assert StoreWatcher(store).take_change() is False

    def test_commit_is_reported_once(self, store):
        """Several commits collapse into one redraw."""
        watcher = StoreWatcher(store)
        store.update_field("story_1", "main_title", "A")
        store.update_field("story_1", "main_title", "B")

        assert watcher.take_change() is True
        assert watcher.take_change() is False

    def test_commit_from_worker_thread(self, store):
        """Commits made on another thread are seen by the page."""
        watcher = StoreWatcher(store)
        worker = threading.Thread(target=store.record_plot, args=("story_1", "{}"))
        worker.start()
        worker.join()

        assert watcher.take_change() is True

    def test_close_stops_listening(self, store):
        """A closed watcher no longer reacts to commits."""
        watcher = StoreWatcher(store)
        watcher.close()
        store.add_folder("Baru")

        assert watcher.take_change() is False
