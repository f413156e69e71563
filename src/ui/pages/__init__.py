"""UI pages for NusaCerita."""

from .editor import EditorPage

__all__ = [
    "EditorPage",
]
