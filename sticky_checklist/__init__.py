"""Sticky checklist notes that survive restarts."""

from .errors import LoadError, NotesError, PersistError
from .geometry import ScreenBounds, clamp
from .manager import NoteManager, TrayEntry, WindowLayer
from .models import NoteItem, NoteRecord
from .store import NoteStore

__version__ = "0.1.0"

__all__ = [
    "LoadError",
    "NoteItem",
    "NoteManager",
    "NoteRecord",
    "NoteStore",
    "NotesError",
    "PersistError",
    "ScreenBounds",
    "TrayEntry",
    "WindowLayer",
    "clamp",
]
