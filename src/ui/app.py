"""Main NiceGUI application for NusaCerita."""

import logging

from nicegui import app, context, ui

from src.memory.story_store import StoryStore
from src.services import ServiceContainer
from src.ui.components.header import Header
from src.ui.components.sidebar import FolderSidebar
from src.ui.pages.editor import EditorPage
from src.ui.state import AppState, StoreWatcher

logger = logging.getLogger(__name__)

# Seconds between checks for commits made by other tabs or worker threads
STORE_SYNC_INTERVAL = 0.5


class NusaCeritaApp:
    """Main NusaCerita application.

    One page at "/" made of the header, the folder drawer and the editor.
    Every browser tab shares the same in-memory store.
    """

    def __init__(self, services: ServiceContainer, store: StoryStore | None = None):
        """Initialize the application.

        Args:
            services: Service container.
            store: Story store to edit. Defaults to a fresh store with the
                seed folders and one bootstrapped story.
        """
        self.services = services
        self.state = AppState(store=store or StoryStore.with_defaults())
        self.state.dark_mode = services.settings.dark_mode
        self.state.sidebar_open = services.settings.sidebar_open

    def _apply_theme(self) -> None:
        """Apply theme settings to the page."""
        if self.state.dark_mode:
            ui.dark_mode().enable()
        else:
            ui.dark_mode().disable()

    def _page_layout(self) -> None:
        """Render the page and wire component refreshes."""
        self._apply_theme()

        editor = EditorPage(self.state, self.services)
        sidebar = FolderSidebar(self.state)
        header = Header(
            self.state,
            self.services,
            on_toggle_sidebar=sidebar.toggle,
            on_fill_example=editor.fill_example,
            on_generate=editor.generate,
        )

        def story_changed() -> None:
            """Refresh the components that show story titles and status."""
            header.refresh()
            sidebar.refresh()

        def story_selected() -> None:
            """Refresh everything after the active story changed."""
            header.refresh()
            editor.refresh()

        editor.on_story_change = story_changed
        sidebar.on_select = story_selected

        header.build()
        sidebar.build()
        editor.build()

        watcher = StoreWatcher(self.state.store)

        def sync_with_store() -> None:
            """Redraw after commits from other tabs or the generation worker."""
            if not watcher.take_change():
                return
            header.refresh()
            sidebar.refresh()
            editor.sync_with_store()

        ui.timer(STORE_SYNC_INTERVAL, sync_with_store)
        context.client.on_disconnect(watcher.close)

    def _setup_global_colors(self) -> None:
        """Set the application's global color palette."""
        colors = app.colors
        colors.primary = "#2196F3"
        colors.secondary = "#607D8B"
        colors.positive = "#4CAF50"
        colors.negative = "#F44336"
        colors.warning = "#FF9800"
        colors.info = "#00BCD4"
        logger.debug("Global color palette configured")

    def _setup_exception_handler(self) -> None:
        """Set up global exception handler for unhandled UI errors."""

        def handle_exception(e: Exception) -> None:
            """Log an unhandled UI exception and notify the user."""
            logger.exception("Unhandled UI exception")
            ui.notify(f"An error occurred: {e}", type="negative", timeout=10000)

        ui.on_exception(handle_exception)
        logger.debug("Global exception handler registered")

    def build(self) -> None:
        """Set up global UI configuration and register the editor page."""
        self._setup_global_colors()
        self._setup_exception_handler()

        @ui.page("/")
        def editor_page() -> None:
            """Render the editor page."""
            self._page_layout()

        app.on_shutdown(self._on_shutdown)
        logger.info("NusaCerita app built")

    def _on_shutdown(self) -> None:
        """Handle application shutdown."""
        if self.state.is_busy:
            logger.warning("Shutting down while a generation is still running")
        logger.info(
            "NusaCerita shutting down (%d stories in memory are discarded)",
            len(self.state.store.stories),
        )

    def run(
        self,
        host: str = "127.0.0.1",
        port: int = 7860,
        title: str = "NusaCerita",
        reload: bool = False,
    ) -> None:
        """Run the application."""
        logger.info("Starting NusaCerita on http://%s:%d", host, port)
        ui.run(
            host=host,
            port=port,
            title=title,
            reload=reload,
            favicon="📖",
            show=False,
        )


def create_app(
    services: ServiceContainer | None = None, store: StoryStore | None = None
) -> NusaCeritaApp:
    """Create and configure the NusaCerita application."""
    if services is None:
        services = ServiceContainer()

    app_instance = NusaCeritaApp(services, store)
    app_instance.build()
    return app_instance
