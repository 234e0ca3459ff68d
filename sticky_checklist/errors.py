class NotesError(Exception):
    """Base class for note persistence errors."""


class PersistError(NotesError):
    """A save could not be committed. The previous notes file is untouched."""

    def __init__(self, step, cause):
        super().__init__(f"save failed during {step}: {cause}")
        self.step = step
        self.cause = cause


class LoadError(NotesError):
    """A notes file is missing, unreadable or not a valid note collection."""

    def __init__(self, path, reason):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
