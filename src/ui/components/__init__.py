"""Reusable UI components for NusaCerita."""

from .header import Header
from .sidebar import FolderSidebar

__all__ = [
    "FolderSidebar",
    "Header",
]
