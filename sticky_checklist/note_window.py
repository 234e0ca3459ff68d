from PyQt6.QtCore import QEvent, Qt, QTimer
from PyQt6.QtGui import QAction, QGuiApplication
from PyQt6.QtWidgets import (QHBoxLayout, QLabel, QLineEdit, QListWidget, QListWidgetItem, QMessageBox,
                             QPlainTextEdit, QPushButton, QSizeGrip, QVBoxLayout, QWidget)

from .geometry import ScreenBounds, virtual_screen_bounds
from .manager import WindowLayer
from .models import COLLAPSED_HEIGHT, items_from_text, items_to_text

NOTE_COLOR = "#FFFF99"
QWIDGETSIZE_MAX = 16777215
FALLBACK_BOUNDS = ScreenBounds(0, 0, 1920, 1080)


class NoteWindow(QWidget):
    """
    A frameless window showing one note's checklist.
    """
    def __init__(self, note, layer):
        super().__init__(None, Qt.WindowType.FramelessWindowHint | Qt.WindowType.Tool)
        self.note = note
        self.layer = layer
        self.allow_close = False
        self.tracking_geometry = False
        self.drag_offset = None

        # Coalesce drag/resize bursts into one geometry report
        self.geometry_timer = QTimer(self)
        self.geometry_timer.setSingleShot(True)
        self.geometry_timer.setInterval(layer.geometry_save_delay_ms)
        self.geometry_timer.timeout.connect(self.report_geometry)

        self.init_ui()

    @property
    def manager(self):
        return self.layer.manager

    def init_ui(self):
        # --- Window Setup ---
        self.setWindowTitle(self.note.title)
        if self.layer.icon is not None:
            self.setWindowIcon(self.layer.icon)
        self.setMinimumWidth(120)

        self.main_layout = QVBoxLayout()
        self.main_layout.setContentsMargins(4, 2, 4, 4)
        self.main_layout.setSpacing(2)
        self.setLayout(self.main_layout)

        # --- Title bar ---
        title_layout = QHBoxLayout()
        self.title_label = QLabel(self.note.title)
        self.title_label.setStyleSheet("font-weight: bold;")
        self.title_editor = QLineEdit(self.note.title)
        self.title_editor.setStyleSheet("font-weight: bold; border: none;")
        self.title_editor.hide()
        title_layout.addWidget(self.title_label, 1)
        title_layout.addWidget(self.title_editor, 1)

        self.collapse_button = QPushButton("▁")
        self.collapse_button.setToolTip("Collapse/Expand")
        self.hide_button = QPushButton("–")
        self.hide_button.setToolTip("Hide Note")
        self.delete_button = QPushButton("🗑")
        self.delete_button.setToolTip("Delete Note")
        for button in (self.collapse_button, self.hide_button, self.delete_button):
            title_layout.addWidget(button)
        self.main_layout.addLayout(title_layout)

        # --- Content ---
        self.content = QWidget()
        content_layout = QVBoxLayout(self.content)
        content_layout.setContentsMargins(0, 0, 0, 0)

        self.items_list = QListWidget()
        self.items_list.setToolTip("Double-click to edit")
        self.edit_box = QPlainTextEdit()
        self.edit_box.setPlaceholderText("[ ] something to do\n[x] something done")
        self.edit_box.hide()
        content_layout.addWidget(self.items_list)
        content_layout.addWidget(self.edit_box)

        grip_layout = QHBoxLayout()
        grip_layout.addStretch()
        self.size_grip = QSizeGrip(self)
        grip_layout.addWidget(self.size_grip)
        content_layout.addLayout(grip_layout)
        self.main_layout.addWidget(self.content)

        self.apply_styles()
        self.populate_items()
        self.apply_collapsed_state()
        self.apply_geometry(self.note.x, self.note.y, self.note.width, self.note.height)

        # --- Connections ---
        self.collapse_button.clicked.connect(self.toggle_collapse)
        self.hide_button.clicked.connect(lambda: self.manager.hide_note(self.note.id))
        self.delete_button.clicked.connect(self.confirm_delete)
        self.items_list.itemChanged.connect(self.on_item_changed)
        self.items_list.itemDoubleClicked.connect(lambda item: self.enter_edit_mode())
        self.title_editor.editingFinished.connect(self.end_title_edit)

        # --- Shortcuts ---
        finish_edit_action = QAction(self)
        finish_edit_action.setShortcut("Ctrl+Return")
        finish_edit_action.triggered.connect(self.exit_edit_mode)
        self.addAction(finish_edit_action)

        self.edit_box.installEventFilter(self)

    def apply_styles(self):
        self.setStyleSheet(f"""
            NoteWindow, QWidget {{ background-color: {NOTE_COLOR}; }}
            QListWidget, QPlainTextEdit, QLineEdit {{ background-color: {NOTE_COLOR}; border: none; }}
            QPushButton {{
                background-color: transparent;
                border: none;
                border-radius: 3px;
                padding: 2px 6px;
                color: #555;
            }}
            QPushButton:hover {{ background-color: rgba(0, 0, 0, 0.08); }}
            QPushButton:pressed {{ background-color: rgba(0, 0, 0, 0.15); }}
        """)

    # --- Checklist ---

    def populate_items(self):
        self.items_list.blockSignals(True)
        self.items_list.clear()
        for item in self.note.items:
            row = QListWidgetItem(item.text)
            row.setFlags(row.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            row.setCheckState(Qt.CheckState.Checked if item.checked else Qt.CheckState.Unchecked)
            self.items_list.addItem(row)
        self.items_list.blockSignals(False)

    def on_item_changed(self, row):
        index = self.items_list.row(row)
        self.manager.set_item_checked(self.note.id, index, row.checkState() == Qt.CheckState.Checked)

    def enter_edit_mode(self):
        if self.edit_box.isVisible():
            return
        self.edit_box.setPlainText(items_to_text(self.note.items))
        self.items_list.hide()
        self.edit_box.show()
        self.edit_box.setFocus()
        self.edit_box.moveCursor(self.edit_box.textCursor().MoveOperation.End)

    def exit_edit_mode(self):
        if not self.edit_box.isVisible():
            return
        self.manager.set_items(self.note.id, items_from_text(self.edit_box.toPlainText()))
        self.edit_box.hide()
        self.items_list.show()
        self.populate_items()

    def eventFilter(self, obj, event):
        if obj is self.edit_box and event.type() == QEvent.Type.FocusOut:
            self.exit_edit_mode()
        return super().eventFilter(obj, event)

    # --- Title ---

    def mouseDoubleClickEvent(self, event):
        if self.title_label.geometry().contains(event.position().toPoint()):
            self.begin_title_edit()
        elif not self.note.collapsed:
            self.enter_edit_mode()
        event.accept()

    def begin_title_edit(self):
        self.title_label.hide()
        self.title_editor.setText(self.note.title)
        self.title_editor.show()
        self.title_editor.setFocus()
        self.title_editor.selectAll()

    def end_title_edit(self):
        if not self.title_editor.isVisible():
            return
        title = self.title_editor.text()
        self.title_editor.hide()
        self.title_label.setText(title)
        self.title_label.show()
        self.setWindowTitle(title)
        self.manager.rename_note(self.note.id, title)

    # --- Collapse ---

    def toggle_collapse(self):
        height = self.manager.set_collapsed(self.note.id, not self.note.collapsed, self.height())
        self.apply_collapsed_state()
        if height is not None and not self.note.collapsed:
            self.resize(self.width(), int(height))

    def apply_collapsed_state(self):
        if self.note.collapsed:
            self.content.hide()
            self.collapse_button.setText("▔")
            self.setFixedHeight(int(COLLAPSED_HEIGHT))
        else:
            self.setMinimumHeight(60)
            self.setMaximumHeight(QWIDGETSIZE_MAX)
            self.content.show()
            self.collapse_button.setText("▁")

    # --- Geometry ---

    def apply_geometry(self, x, y, width, height):
        if self.note.collapsed:
            height = COLLAPSED_HEIGHT
        self.setGeometry(int(x), int(y), int(width), int(height))

    def schedule_geometry_report(self):
        if self.tracking_geometry:
            self.geometry_timer.start()

    def report_geometry(self):
        if self.manager is None or self.manager.get(self.note.id) is None:
            return
        # A collapsed window's height is not the note's height
        height = self.note.height if self.note.collapsed else self.height()
        self.manager.update_geometry(self.note.id, self.x(), self.y(), self.width(), height)

    def showEvent(self, event):
        super().showEvent(event)
        self.tracking_geometry = True

    def moveEvent(self, event):
        super().moveEvent(event)
        self.schedule_geometry_report()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.schedule_geometry_report()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.drag_offset = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self.drag_offset is not None and event.buttons() & Qt.MouseButton.LeftButton:
            self.move(event.globalPosition().toPoint() - self.drag_offset)
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        self.drag_offset = None
        super().mouseReleaseEvent(event)

    def changeEvent(self, event):
        # Notes are never maximized
        if event.type() == QEvent.Type.WindowStateChange and self.isMaximized():
            QTimer.singleShot(0, self.showNormal)
        super().changeEvent(event)

    # --- Closing ---

    def confirm_delete(self):
        reply = QMessageBox.question(self, "Delete Note", "Delete this note permanently?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            self.manager.delete_note(self.note.id)

    def close_for_good(self):
        self.allow_close = True
        self.geometry_timer.stop()
        self.close()
        self.deleteLater()

    def closeEvent(self, event):
        # When the whole app is quitting, the manager has already saved.
        if self.allow_close or self.layer.quitting:
            super().closeEvent(event)
            return
        # Closing a note only hides it
        event.ignore()
        self.manager.hide_note(self.note.id)


class QtWindowLayer(WindowLayer):
    """NoteManager's view of the screen, backed by NoteWindow widgets."""

    def __init__(self, icon=None, geometry_save_delay_ms=300):
        self.icon = icon
        self.geometry_save_delay_ms = geometry_save_delay_ms
        self.manager = None
        self.quitting = False

    def attach(self, manager):
        self.manager = manager

    def create_window(self, note):
        window = NoteWindow(note, self)
        self.show_window(window)
        return window

    def show_window(self, handle):
        handle.show()
        handle.raise_()
        handle.activateWindow()

    def hide_window(self, handle):
        handle.hide()

    def close_window(self, handle):
        handle.close_for_good()

    def set_window_geometry(self, handle, x, y, width, height):
        handle.apply_geometry(x, y, width, height)

    def restore_window(self, handle):
        # Clearing the state flags does not show a hidden window
        if handle.isMaximized() or handle.isMinimized():
            handle.setWindowState(Qt.WindowState.WindowNoState)

    def screen_bounds(self):
        screens = QGuiApplication.screens()
        bounds = virtual_screen_bounds(screen.availableGeometry() for screen in screens)
        return bounds or FALLBACK_BOUNDS
