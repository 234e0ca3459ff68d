import os
from pathlib import Path

HOME_ENV_VAR = "STICKY_CHECKLIST_HOME"
DEFAULT_DATA_DIR = Path.home() / ".sticky_checklist"


class AppConfig:
    """File locations and tunables for one application instance."""

    def __init__(self, data_dir=None, keep_backups=50, hotkey="<ctrl>+<alt>+n",
                 geometry_save_delay_ms=300):
        if data_dir is None:
            data_dir = os.environ.get(HOME_ENV_VAR) or DEFAULT_DATA_DIR
        # --- File and Path Setup ---
        self.data_dir = Path(data_dir).expanduser()
        self.notes_file = self.data_dir / "notes.json"
        self.temp_file = self.data_dir / "notes.json.tmp"
        self.backup_dir = self.data_dir / "Backups"
        self.log_file = self.data_dir / "notes.log"
        self.icon_file = self.data_dir / "icon.png"

        # --- Tunables ---
        self.keep_backups = keep_backups
        self.hotkey = hotkey
        self.geometry_save_delay_ms = geometry_save_delay_ms

    def ensure_dirs(self):
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)
