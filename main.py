#!/usr/bin/env python3
"""NusaCerita - chapter drafting workspace with local LLM generation.

Organize stories in folders, fill in the chapter form (setting, genres,
characters, dialogs) and let an Ollama model write the plot outline and the
chapter narrative.

Usage:
    python main.py                      # Launch NiceGUI web UI
    python main.py --port 8080 --reload # Development server
"""

import argparse
import logging
import sys
import time

from src.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def run_web_ui(
    host: str = "127.0.0.1",
    port: int = 7860,
    reload: bool = False,
    startup_t0: float | None = None,
) -> None:
    """Launch the NiceGUI web interface.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Enable auto-reload for development.
        startup_t0: Start time from main() for accurate startup timing.
    """
    from src.services import ServiceContainer
    from src.settings import Settings
    from src.ui import create_app

    logger.info("Starting NusaCerita web UI...")

    t0 = time.perf_counter()
    settings = Settings.load()
    logger.info("Settings loaded in %.2fs", time.perf_counter() - t0)

    services = ServiceContainer(settings)

    t1 = time.perf_counter()
    app = create_app(services)
    logger.info("App created in %.2fs", time.perf_counter() - t1)

    total_t0 = startup_t0 if startup_t0 is not None else t0
    logger.info("Startup complete in %.2fs, launching server...", time.perf_counter() - total_t0)
    app.run(host=host, port=port, reload=reload)


def build_parser() -> argparse.ArgumentParser:
    """Command line arguments of the web UI."""
    parser = argparse.ArgumentParser(description="NusaCerita - chapter drafting with local LLMs")
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host for web UI (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=7860,
        help="Port for web UI (default: 7860)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: the log_level setting)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default="default",
        help="Log file path (default: logs/nusacerita.log, use 'none' to disable)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    t0 = time.perf_counter()
    args = build_parser().parse_args(argv)

    log_level = args.log_level
    if log_level is None:
        # No explicit --log-level: respect the persisted setting
        from src.settings import Settings

        try:
            log_level = Settings.load().log_level
        except ValueError as e:
            log_level = "INFO"
            print(f"Invalid settings file, using INFO logging: {e}", file=sys.stderr)

    log_file = None if args.log_file.lower() == "none" else args.log_file
    setup_logging(level=log_level, log_file=log_file)

    run_web_ui(host=args.host, port=args.port, reload=args.reload, startup_t0=t0)


if __name__ in {"__main__", "__mp_main__"}:
    main()
