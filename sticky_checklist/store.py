import json
import logging
import os
import shutil
import threading
from datetime import datetime
from pathlib import Path

from .errors import LoadError, PersistError
from .models import NoteRecord

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "notes_"
BACKUP_STAMP_FORMAT = "%Y%m%d_%H%M%S"

# One save at a time for the whole process, whichever store instance runs it.
_SAVE_LOCK = threading.Lock()


class NoteStore:
    """Saves and loads the note collection as ``notes.json``.

    Saves go through ``notes.json.tmp`` and an atomic rename, after copying
    the previous ``notes.json`` into ``Backups/``. Loads fall back to the
    newest readable backup when the main file is damaged.
    """

    def __init__(self, config, clock=datetime.now):
        self.config = config
        self.clock = clock

    # --- Saving ---

    def save(self, notes):
        """Commit ``notes`` to disk or raise PersistError.

        On failure the previously committed notes file is left as it was.
        """
        payload = json.dumps([note.to_dict() for note in notes], indent=2, ensure_ascii=False)

        with _SAVE_LOCK:
            try:
                self.config.ensure_dirs()
            except OSError as e:
                raise PersistError("prepare", e) from e

            try:
                self._write_temp(payload)
            except OSError as e:
                self._discard_temp()
                raise PersistError("write", e) from e

            if self.config.notes_file.exists():
                try:
                    self._backup_current()
                except OSError as e:
                    self._discard_temp()
                    raise PersistError("backup", e) from e

            try:
                os.replace(self.config.temp_file, self.config.notes_file)
            except OSError as e:
                self._discard_temp()
                raise PersistError("replace", e) from e

            logger.debug("Saved %d notes to %s", len(notes), self.config.notes_file)
            self.prune_backups()

    def _write_temp(self, payload):
        with open(self.config.temp_file, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())

    def _discard_temp(self):
        try:
            self.config.temp_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove %s: %s", self.config.temp_file, e)

    def _backup_current(self):
        """Copy the current notes file to a timestamped backup.

        An existing backup with the same name is kept and this backup skipped.
        """
        stamp = self.clock().strftime(BACKUP_STAMP_FORMAT)
        backup_path = self.config.backup_dir / f"{BACKUP_PREFIX}{stamp}.json"
        try:
            target = open(backup_path, "xb")
        except FileExistsError:
            logger.warning("Backup %s already exists, skipping backup for this save", backup_path.name)
            return None

        try:
            with target:
                _copy_durably(self.config.notes_file, target)
        except OSError:
            backup_path.unlink(missing_ok=True)
            raise
        return backup_path

    def list_backups(self):
        """Backup files, newest first.

        Ordered by the timestamp in the file name; creation times are not
        reliable after files have been copied around.
        """
        try:
            backups = [p for p in self.config.backup_dir.glob(f"{BACKUP_PREFIX}*.json") if p.is_file()]
        except OSError as e:
            logger.warning("Could not list backups in %s: %s", self.config.backup_dir, e)
            return []
        return sorted(backups, key=lambda p: p.name, reverse=True)

    def prune_backups(self, keep=None):
        if keep is None:
            keep = self.config.keep_backups
        for path in self.list_backups()[keep:]:
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Could not prune backup %s: %s", path.name, e)

    # --- Loading ---

    def load(self):
        """Return the saved notes, recovering from backups when needed.

        Never raises. Returns an empty list when nothing usable is on disk.
        """
        try:
            notes = self.read_file(self.config.notes_file)
        except LoadError as e:
            if self.config.notes_file.exists():
                logger.warning("Notes file unusable, trying backups: %s", e)
            else:
                logger.info("No notes file at %s yet", self.config.notes_file)
        else:
            logger.info("Loaded %d notes from %s", len(notes), self.config.notes_file)
            return notes

        for backup in self.list_backups():
            try:
                notes = self.read_file(backup)
            except LoadError as e:
                logger.warning("Skipping unusable backup: %s", e)
                continue
            logger.warning("Recovered %d notes from backup %s", len(notes), backup.name)
            self._restore_primary(backup)
            return notes

        return []

    def read_file(self, path):
        """Parse one notes file. Raises LoadError unless every note is valid."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise LoadError(path, "file does not exist") from None
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(path, f"unreadable: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise LoadError(path, f"invalid JSON: {e}") from e
        except RecursionError as e:
            raise LoadError(path, "nested too deeply to parse") from e
        if not isinstance(data, list):
            raise LoadError(path, f"expected a list of notes, got {type(data).__name__}")

        try:
            notes = [NoteRecord.from_dict(entry) for entry in data]
        except ValueError as e:
            raise LoadError(path, f"malformed note: {e}") from e

        seen = set()
        for note in notes:
            if note.id in seen:
                raise LoadError(path, f"duplicate note id {note.id}")
            seen.add(note.id)
        return notes

    def _restore_primary(self, backup):
        with _SAVE_LOCK:
            try:
                self.config.ensure_dirs()
                with open(self.config.temp_file, "wb") as target:
                    _copy_durably(backup, target)
                os.replace(self.config.temp_file, self.config.notes_file)
            except OSError as e:
                self._discard_temp()
                logger.error("Could not restore %s from backup %s: %s", self.config.notes_file, backup.name, e)


def _copy_durably(source_path, target):
    """Copy a file into an open binary file and flush it to disk."""
    with open(source_path, "rb") as source:
        shutil.copyfileobj(source, target)
    target.flush()
    os.fsync(target.fileno())
