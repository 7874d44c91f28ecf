"""Core data types for the key-value editor.

This package contains the pieces that have no terminal dependency:
- collection.py: Entry and the ordered, key-unique Collection
- session.py: controller states and the editable SessionState
- events.py: semantic controller events
- actions.py: actions returned by the controller to the render loop
- errors.py: the exception hierarchy
"""

from .collection import Entry, Collection
from .errors import (
    JuteError,
    ValidationError,
    EmptyCollection,
    ExportError,
    KeyConfigError,
    TerminalError,
)
from .events import ControllerEvent, ControllerEventType
from .actions import ActionKind, ControllerAction
from .session import ControllerState, EditField, TextBuffer, SessionState

__all__ = [
    "Entry",
    "Collection",
    "JuteError",
    "ValidationError",
    "EmptyCollection",
    "ExportError",
    "KeyConfigError",
    "TerminalError",
    "ControllerEvent",
    "ControllerEventType",
    "ActionKind",
    "ControllerAction",
    "ControllerState",
    "EditField",
    "TextBuffer",
    "SessionState",
]
