from collections import namedtuple

MIN_WIDTH = 120
MIN_HEIGHT = 60
# Part of the window that must stay on screen so it can still be grabbed
VISIBLE_MARGIN = 40

NORMAL_MAX_WIDTH = 400
NORMAL_MAX_HEIGHT = 300

ScreenBounds = namedtuple("ScreenBounds", ["left", "top", "right", "bottom"])


def clamp(note, bounds):
    """Pull a note's geometry back into the virtual screen.

    Enforces the minimum size, then clamps x and y. The lower bound is applied
    last so it wins when the bounds are degenerate.
    """
    if note.width < MIN_WIDTH:
        note.width = MIN_WIDTH
    if note.height < MIN_HEIGHT:
        note.height = MIN_HEIGHT

    max_x = bounds.right - VISIBLE_MARGIN
    max_y = bounds.bottom - VISIBLE_MARGIN
    min_x = bounds.left
    min_y = bounds.top

    if note.x > max_x:
        note.x = max_x
    if note.y > max_y:
        note.y = max_y
    if note.x < min_x:
        note.x = min_x
    if note.y < min_y:
        note.y = min_y
    return note


def virtual_screen_bounds(screen_rects):
    """Union of the available area of every monitor.

    ``screen_rects`` are QRect-like objects (``x()``, ``y()``, ``width()``,
    ``height()``), e.g. ``[s.availableGeometry() for s in QGuiApplication.screens()]``.
    """
    rects = list(screen_rects)
    if not rects:
        return None
    left = min(r.x() for r in rects)
    top = min(r.y() for r in rects)
    right = max(r.x() + r.width() for r in rects)
    bottom = max(r.y() + r.height() for r in rects)
    return ScreenBounds(left, top, right, bottom)


def cap_to_normal_size(note):
    """Shrink an oversized note. Small notes are left alone."""
    note.width = min(note.width, NORMAL_MAX_WIDTH)
    note.height = min(note.height, NORMAL_MAX_HEIGHT)
    return note
