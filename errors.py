class HabitEngineError(Exception):
    """Base class for errors raised by the habit store."""


class InvalidInput(HabitEngineError):
    pass


class NotFound(HabitEngineError):
    pass


class SnapshotImportError(HabitEngineError):
    """An import document could not be parsed or validated; nothing was replaced."""
