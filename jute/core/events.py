"""Semantic events consumed by the input controller.

Raw key presses are translated into these events by the InputHandler using
the key-binding configuration, so the controller never sees key codes.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ControllerEventType(Enum):
    """Types of events the controller understands."""
    # Text editing
    CHAR = auto()
    BACKSPACE = auto()
    CURSOR_LEFT = auto()
    CURSOR_RIGHT = auto()
    CURSOR_HOME = auto()
    CURSOR_END = auto()
    NEXT_FIELD = auto()
    CONFIRM = auto()
    DISCARD_ENTRY = auto()

    # Entry list
    NEW_ENTRY = auto()
    EDIT_ENTRY = auto()
    DELETE_ENTRY = auto()
    SELECT_PREVIOUS = auto()
    SELECT_NEXT = auto()

    # Session
    REQUEST_EXIT = auto()
    DISMISS_PROMPT = auto()
    SUBMIT = auto()
    CANCEL = auto()


@dataclass(frozen=True)
class ControllerEvent:
    """One semantic event. ``char`` is set only for CHAR events."""
    event_type: ControllerEventType
    char: Optional[str] = None

    def __post_init__(self):
        if self.event_type == ControllerEventType.CHAR:
            if self.char is None or len(self.char) != 1:
                raise ValueError("CHAR events carry exactly one character")
        elif self.char is not None:
            raise ValueError(f"{self.event_type.name} events carry no character")

    @classmethod
    def character(cls, char: str) -> "ControllerEvent":
        return cls(ControllerEventType.CHAR, char)

    @classmethod
    def of(cls, event_type: ControllerEventType) -> "ControllerEvent":
        return cls(event_type)

    @classmethod
    def from_name(cls, name: str) -> "ControllerEvent":
        """Build an event from a binding name such as ``"confirm"``."""
        try:
            event_type = ControllerEventType[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown controller event '{name}'") from None
        return cls(event_type)


def text(value: str) -> list[ControllerEvent]:
    """Expand a string into CHAR events, one per character."""
    return [ControllerEvent.character(char) for char in value]
