"""UI module for NusaCerita.

NiceGUI-based web interface with a single editor page:
- Header (breadcrumb, Fill Example, Generate Plot & Story, Ollama status)
- Folder sidebar (folders and their stories)
- Editor (story form, characters, dialogs, generation results)
"""

from .app import NusaCeritaApp, create_app
from .state import AppState

__all__ = [
    "AppState",
    "NusaCeritaApp",
    "create_app",
]
