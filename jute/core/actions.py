"""Actions returned by the controller to tell the render loop what to do next."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .errors import JuteError


class ActionKind(Enum):
    """What the rendering surface should do after an event."""
    REDRAW = auto()     # State changed, draw again
    NONE = auto()       # Nothing changed
    TERMINATE = auto()  # Session reached Finalized or Cancelled


@dataclass(frozen=True)
class ControllerAction:
    """Result of handling one event.

    ``error`` carries a recoverable failure (ValidationError, EmptyCollection)
    so the caller can re-prompt. ``message`` is a short status line for the UI.
    """
    kind: ActionKind
    error: Optional[JuteError] = None
    message: Optional[str] = None

    @classmethod
    def redraw(cls, message: Optional[str] = None) -> "ControllerAction":
        return cls(ActionKind.REDRAW, message=message)

    @classmethod
    def none(cls) -> "ControllerAction":
        return cls(ActionKind.NONE)

    @classmethod
    def terminate(cls, message: Optional[str] = None) -> "ControllerAction":
        return cls(ActionKind.TERMINATE, message=message)

    @classmethod
    def failed(cls, error: JuteError) -> "ControllerAction":
        return cls(ActionKind.REDRAW, error=error, message=str(error))

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @property
    def should_terminate(self) -> bool:
        return self.kind == ActionKind.TERMINATE
