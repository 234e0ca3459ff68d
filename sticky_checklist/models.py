import math
import re
import uuid
from dataclasses import dataclass, field

# --- Geometry defaults ---
DEFAULT_X = 200.0
DEFAULT_Y = 200.0
DEFAULT_WIDTH = 250.0
DEFAULT_HEIGHT = 200.0
COLLAPSED_HEIGHT = 30.0

_CHECKBOX_LINE = re.compile(r"^\[( |x)\]\s*(.*)$", re.IGNORECASE)


def new_note_id():
    return str(uuid.uuid4())


@dataclass
class NoteItem:
    text: str = ""
    checked: bool = False

    def to_dict(self):
        return {"text": self.text, "checked": self.checked}

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValueError(f"item must be an object, got {type(data).__name__}")
        return cls(
            text=_read(data, "text", str, ""),
            checked=_read(data, "checked", bool, False),
        )


@dataclass
class NoteRecord:
    """One sticky note: a titled checklist plus its window geometry.

    Field names in ``to_dict`` are the on-disk names and must stay stable so
    older notes files keep loading.
    """

    id: str = field(default_factory=new_note_id)
    items: list = field(default_factory=list)
    title: str = "Note"
    collapsed: bool = False
    expanded_height: float = DEFAULT_HEIGHT
    x: float = DEFAULT_X
    y: float = DEFAULT_Y
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    visible: bool = True

    def restore_height(self):
        """Height to use when a collapsed note is expanded again."""
        if self.expanded_height > COLLAPSED_HEIGHT:
            return self.expanded_height
        return DEFAULT_HEIGHT

    def to_dict(self):
        return {
            "id": self.id,
            "items": [item.to_dict() for item in self.items],
            "title": self.title,
            "collapsed": self.collapsed,
            "expandedHeight": self.expanded_height,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "visible": self.visible,
        }

    @classmethod
    def from_dict(cls, data):
        """Build a note from its stored form.

        Missing fields fall back to the defaults of a fresh note. A field that
        is present but has the wrong type raises ValueError, so a damaged file
        is rejected as a whole instead of loading half of it.
        """
        if not isinstance(data, dict):
            raise ValueError(f"note must be an object, got {type(data).__name__}")

        raw_id = data.get("id")
        if raw_id is None:
            note_id = new_note_id()
        elif isinstance(raw_id, str):
            note_id = str(uuid.UUID(raw_id))
        else:
            raise ValueError("note id must be a string")

        items = data.get("items", [])
        if not isinstance(items, list):
            raise ValueError("items must be a list")

        return cls(
            id=note_id,
            items=[NoteItem.from_dict(item) for item in items],
            title=_read(data, "title", str, "Note"),
            collapsed=_read(data, "collapsed", bool, False),
            expanded_height=_read_number(data, "expandedHeight", DEFAULT_HEIGHT),
            x=_read_number(data, "x", DEFAULT_X),
            y=_read_number(data, "y", DEFAULT_Y),
            width=_read_number(data, "width", DEFAULT_WIDTH),
            height=_read_number(data, "height", DEFAULT_HEIGHT),
            visible=_read(data, "visible", bool, True),
        )


def _read(data, key, kind, default):
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"{key} must be {kind.__name__}, got {type(value).__name__}")
    return value


def _read_number(data, key, default):
    value = data.get(key, default)
    if value is None:
        return default
    # bool is an int subclass; true/false is never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError:
        raise ValueError(f"{key} is out of range") from None
    if not math.isfinite(number):
        raise ValueError(f"{key} must be a finite number, got {number}")
    return number


def items_to_text(items):
    """Render items as editable lines: ``[x] done`` / ``[ ] todo``."""
    return "\n".join(("[x] " if item.checked else "[ ] ") + item.text for item in items)


def items_from_text(text):
    """Parse edited lines back into items. Blank lines are dropped."""
    items = []
    for line in text.split("\n"):
        line = line.rstrip("\r")
        match = _CHECKBOX_LINE.match(line)
        if match:
            items.append(NoteItem(text=match.group(2), checked=match.group(1).lower() == "x"))
        elif line.strip():
            items.append(NoteItem(text=line, checked=False))
    return items
