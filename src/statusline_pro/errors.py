"""Exception hierarchy for statusline-pro."""


class StatusLineError(Exception):
    """Base class for all errors raised by statusline-pro."""


class ConfigError(StatusLineError):
    """A configuration file could not be found or parsed."""


class StorageError(StatusLineError):
    """The snapshot store could not be initialised or written."""


class TranscriptReadError(StorageError):
    """The transcript exists but could not be read."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"Failed to read transcript {path}: {cause}")
        self.path = path
        self.cause = cause
