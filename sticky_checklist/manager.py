import logging
import threading
from abc import ABC, abstractmethod
from collections import namedtuple

from .errors import PersistError
from .geometry import cap_to_normal_size, clamp
from .models import COLLAPSED_HEIGHT, DEFAULT_X, DEFAULT_Y, NoteItem, NoteRecord

logger = logging.getLogger(__name__)

# Offset between consecutive new notes so they don't stack exactly
STAGGER_STEP = 30

TrayEntry = namedtuple("TrayEntry", ["id", "title", "visible"])


class WindowLayer(ABC):
    """What the note manager needs from the windowing toolkit.

    Handles returned by ``create_window`` are opaque to the manager.
    """

    @abstractmethod
    def create_window(self, note):
        """Create and show a window for ``note``; return its handle."""

    @abstractmethod
    def show_window(self, handle):
        """Show the window and give it focus."""

    @abstractmethod
    def hide_window(self, handle):
        pass

    @abstractmethod
    def close_window(self, handle):
        pass

    @abstractmethod
    def set_window_geometry(self, handle, x, y, width, height):
        pass

    @abstractmethod
    def restore_window(self, handle):
        """Bring a maximized or minimized window back to its normal state."""

    @abstractmethod
    def screen_bounds(self):
        """Current virtual screen bounds as a ScreenBounds."""


class NoteManager:
    """Owns the note collection and the note id -> window registry.

    Every mutation updates memory first and then saves. Save failures are
    logged and kept in ``last_persist_error``; memory stays authoritative
    for the rest of the session.

    All methods must run on the thread that created the manager (the UI
    thread). Work from other threads has to be marshalled there first.
    """

    def __init__(self, store, windows):
        self.store = store
        self.windows = windows
        self.notes = []
        self.registry = {}
        self.last_persist_error = None
        self._owner_thread = threading.get_ident()

    def initialize(self):
        self._require_owner_thread()
        self.notes = list(self.store.load())
        for note in self.notes:
            if note.visible:
                self._open_window(note)
        if not self.notes:
            self.create_note()

    # --- Lookup ---

    def get(self, note_id):
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def list_for_tray(self):
        return [TrayEntry(note.id, note.title, note.visible) for note in self.notes]

    # --- Lifecycle ---

    def create_note(self):
        self._require_owner_thread()
        offset = len(self.notes) * STAGGER_STEP
        note = NoteRecord(x=DEFAULT_X + offset, y=DEFAULT_Y + offset)
        clamp(note, self.windows.screen_bounds())
        self.notes.append(note)
        self._persist()
        self._open_window(note)
        logger.info("Created note %s", note.id)
        return note

    def delete_note(self, note_id):
        self._require_owner_thread()
        note = self.get(note_id)
        if note is not None:
            self.notes.remove(note)
        # Removed before closing so edits flushed by the window are dropped
        handle = self.registry.pop(note_id, None)
        if handle is not None:
            self.windows.close_window(handle)
        if note is None:
            return
        self._persist()
        logger.info("Deleted note %s", note_id)

    def hide_note(self, note_id):
        self._require_owner_thread()
        note = self.get(note_id)
        if note is None:
            return
        note.visible = False
        handle = self.registry.get(note_id)
        if handle is not None:
            self.windows.hide_window(handle)
        self._persist()

    def show_note(self, note_id):
        self._require_owner_thread()
        note = self.get(note_id)
        if note is None:
            return
        self._reveal(note)
        self._persist()

    def show_all_notes(self):
        self._require_owner_thread()
        for note in self.notes:
            self._reveal(note)
        self._persist()

    def bring_all_on_screen(self):
        self._require_owner_thread()
        bounds = self.windows.screen_bounds()
        for note in self.notes:
            clamp(note, bounds)
            handle = self.registry.get(note.id)
            if handle is not None:
                self.windows.set_window_geometry(handle, note.x, note.y, note.width, note.height)
                if note.visible:
                    self.windows.show_window(handle)
        self._persist()

    def normalize_all_notes(self):
        self._require_owner_thread()
        for note in self.notes:
            cap_to_normal_size(note)
            handle = self.registry.get(note.id)
            if handle is not None:
                self.windows.restore_window(handle)
                self.windows.set_window_geometry(handle, note.x, note.y, note.width, note.height)
        self._persist()

    def shutdown(self):
        """Final save before the application exits."""
        self._require_owner_thread()
        self._persist()

    # --- Edits reported by note windows ---

    def update_geometry(self, note_id, x, y, width, height):
        """Store geometry exactly as the user left it; no clamping."""
        self._require_owner_thread()
        note = self.get(note_id)
        if note is None:
            return
        note.x = float(x)
        note.y = float(y)
        note.width = float(width)
        note.height = float(height)
        self._persist()

    def rename_note(self, note_id, title):
        self._require_owner_thread()
        note = self.get(note_id)
        if note is None:
            return
        note.title = title
        self._persist()

    def set_items(self, note_id, items):
        self._require_owner_thread()
        note = self.get(note_id)
        if note is None:
            return
        note.items = [NoteItem(item.text, item.checked) for item in items]
        self._persist()

    def set_item_checked(self, note_id, index, checked):
        self._require_owner_thread()
        note = self.get(note_id)
        if note is None or not 0 <= index < len(note.items):
            return
        note.items[index].checked = bool(checked)
        self._persist()

    def set_collapsed(self, note_id, collapsed, current_height=None):
        """Collapse or expand a note and return the window height to use.

        Collapsing remembers ``current_height`` as the height to come back to.
        """
        self._require_owner_thread()
        note = self.get(note_id)
        if note is None:
            return None
        if collapsed:
            if not note.collapsed and current_height is not None:
                note.expanded_height = float(current_height)
            note.collapsed = True
            height = COLLAPSED_HEIGHT
        else:
            note.collapsed = False
            height = note.restore_height()
            note.height = height
        self._persist()
        return height

    # --- Internals ---

    def _reveal(self, note):
        note.visible = True
        handle = self.registry.get(note.id)
        if handle is not None:
            self.windows.show_window(handle)
        else:
            self._open_window(note)

    def _open_window(self, note):
        clamp(note, self.windows.screen_bounds())
        self.registry[note.id] = self.windows.create_window(note)

    def _persist(self):
        try:
            self.store.save(self.notes)
        except PersistError as e:
            self.last_persist_error = e
            logger.error("Could not save notes, continuing in memory: %s", e)
        else:
            self.last_persist_error = None

    def _require_owner_thread(self):
        if threading.get_ident() != self._owner_thread:
            raise RuntimeError("NoteManager must only be used from the thread that created it")
