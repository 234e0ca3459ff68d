import logging
import os
import sys
from pathlib import Path

# PyQt6 imports
from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtGui import QAction, QIcon
from PyQt6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

# PIL for icon handling
from PIL import Image, ImageDraw

# Global hotkey support
from pynput import keyboard

from .config import AppConfig
from .log import configure_logging
from .manager import NoteManager
from .note_window import QtWindowLayer
from .store import NoteStore

logger = logging.getLogger(__name__)


def resource_path(relative_path):
    """ Get absolute path to resource, works for dev and for PyInstaller """
    base_path = getattr(sys, "_MEIPASS", os.path.abspath("."))
    return os.path.join(base_path, relative_path)


class HotkeySignaler(QObject):
    """Helper class to emit Qt signals from the hotkey thread"""
    create_note_signal = pyqtSignal()


class StickyChecklistApp:
    def __init__(self, config=None):
        # --- Config and Logging ---
        self.config = config or AppConfig()
        self.config.ensure_dirs()
        configure_logging(self.config)
        self.hotkey_listener = None
        self.shut_down = False

        # --- Qt App Initialization ---
        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.app_icon = self.create_icon()
        self.app.setWindowIcon(self.app_icon)

        # --- Notes Core ---
        self.window_layer = QtWindowLayer(self.app_icon, self.config.geometry_save_delay_ms)
        self.manager = NoteManager(NoteStore(self.config), self.window_layer)
        self.window_layer.attach(self.manager)

        # --- Global Hotkey Setup ---
        self.hotkey_signaler = HotkeySignaler()
        self.hotkey_signaler.create_note_signal.connect(self.manager.create_note)
        self.start_hotkey_listener()

        self.init_tray_icon()
        self.app.aboutToQuit.connect(self.on_about_to_quit)
        self.manager.initialize()

    def start_hotkey_listener(self):
        """Start the global hotkey listener in a background thread"""
        def on_activate():
            # The listener thread must not touch notes; hand over to the UI thread
            self.hotkey_signaler.create_note_signal.emit()

        try:
            hotkey = keyboard.HotKey(keyboard.HotKey.parse(self.config.hotkey), on_activate)
        except ValueError as e:
            logger.warning("Invalid hotkey %r, global hotkey disabled: %s", self.config.hotkey, e)
            return

        def for_canonical(f):
            return lambda k: f(listener.canonical(k))

        listener = keyboard.Listener(
            on_press=for_canonical(hotkey.press),
            on_release=for_canonical(hotkey.release)
        )
        listener.daemon = True
        listener.start()
        self.hotkey_listener = listener

    def create_icon(self):
        icon_path = Path(resource_path("icon.png"))
        if icon_path.exists():
            return QIcon(str(icon_path))

        icon_path = self.config.icon_file
        if not icon_path.exists():
            img = Image.new('RGB', (64, 64), color='#FFD700')
            d = ImageDraw.Draw(img)
            d.rectangle((14, 18, 24, 28), outline='black', width=2)
            d.line((30, 23, 52, 23), fill='black', width=3)
            d.rectangle((14, 38, 24, 48), outline='black', width=2)
            d.line((30, 43, 52, 43), fill='black', width=3)
            img.save(icon_path)
        return QIcon(str(icon_path))

    # --- Tray ---

    def init_tray_icon(self):
        self.tray_icon = QSystemTrayIcon(self.app_icon, self.app)
        self.tray_icon.setToolTip("Sticky Checklist")

        self.tray_menu = QMenu()
        self.tray_menu.aboutToShow.connect(self.rebuild_tray_menu)
        self.rebuild_tray_menu()
        self.tray_icon.setContextMenu(self.tray_menu)
        self.tray_icon.activated.connect(self.on_tray_activated)
        self.tray_icon.show()

    def rebuild_tray_menu(self):
        menu = self.tray_menu
        menu.clear()

        actions = [
            ("New Note", self.manager.create_note),
            ("Show All Notes", self.manager.show_all_notes),
            ("Bring Notes On-Screen", self.manager.bring_all_on_screen),
            ("Normalize All Notes", self.manager.normalize_all_notes),
        ]
        for label, slot in actions:
            action = QAction(label, menu)
            action.triggered.connect(slot)
            menu.addAction(action)

        notes_menu = menu.addMenu("Notes")
        entries = self.manager.list_for_tray()
        notes_menu.setEnabled(bool(entries))
        for entry in entries:
            label = entry.title or "Note"
            if not entry.visible:
                label += " (hidden)"
            action = QAction(label, notes_menu)
            action.triggered.connect(lambda checked=False, note_id=entry.id: self.manager.show_note(note_id))
            notes_menu.addAction(action)

        menu.addSeparator()
        quit_action = QAction("Exit", menu)
        quit_action.triggered.connect(self.quit_app)
        menu.addAction(quit_action)

    def on_tray_activated(self, reason):
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.manager.create_note()

    # --- Lifetime ---

    def run(self):
        return self.app.exec()

    def quit_app(self):
        """Saves all data and exits the application."""
        QApplication.instance().quit()

    def on_about_to_quit(self):
        if self.shut_down:
            return
        self.shut_down = True
        self.window_layer.quitting = True
        if self.hotkey_listener is not None:
            self.hotkey_listener.stop()
        self.manager.shutdown()
        self.tray_icon.hide()
        logger.info("Sticky Checklist exiting")


def main():
    app = StickyChecklistApp()
    sys.exit(app.run())


if __name__ == "__main__":
    main()
