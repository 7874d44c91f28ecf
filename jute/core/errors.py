"""Exception hierarchy for the editor and exporter.

Recoverable errors (ValidationError, EmptyCollection) are reported back to
the render loop inside a ControllerAction and re-prompt the user. Fatal
errors (ExportError, TerminalError) end the session with a reported cause.
"""


class JuteError(Exception):
    """Base class for all editor errors."""


class ValidationError(JuteError):
    """Raised when an entry cannot be confirmed (empty key)."""

    def __init__(self, message: str = "Key must not be empty"):
        super().__init__(message)


class EmptyCollection(JuteError):
    """Raised when submitting a session that holds no entries."""

    def __init__(self, message: str = "Nothing to export: add at least one pair"):
        super().__init__(message)


class ExportError(JuteError, OSError):
    """Raised when the serialized document cannot be written to its sink."""

    def __init__(self, sink: str, reason: str):
        self.sink = sink
        self.reason = reason
        super().__init__(f"Cannot write to {sink}: {reason}")

    def __str__(self) -> str:
        return f"Cannot write to {self.sink}: {self.reason}"


class KeyConfigError(JuteError):
    """Raised when a key-binding file is present but malformed."""


class TerminalError(JuteError):
    """Raised when no interactive terminal is available."""
