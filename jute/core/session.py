"""Session state for the key-value editor.

This module defines the controller states and the :class:`SessionState`
dataclass that the controller threads through every transition. The state is
an explicit value rather than a module-level singleton so each test (and each
run) works on its own copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Optional

from .collection import Collection, Entry


class EditField(Enum):
    """Which input box has focus."""

    KEY = auto()
    VALUE = auto()


class ControllerState(Enum):
    """States of the input state machine."""

    EDITING_KEY = auto()
    EDITING_VALUE = auto()
    IDLE = auto()
    FINALIZED = auto()
    CANCELLED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (ControllerState.FINALIZED, ControllerState.CANCELLED)

    @property
    def is_editing(self) -> bool:
        return self in (ControllerState.EDITING_KEY, ControllerState.EDITING_VALUE)

    @property
    def focus(self) -> Optional[EditField]:
        if self == ControllerState.EDITING_KEY:
            return EditField.KEY
        if self == ControllerState.EDITING_VALUE:
            return EditField.VALUE
        return None


@dataclass
class TextBuffer:
    """An editable line of text with a cursor.

    The cursor is an index between characters, 0..len(text).
    """

    text: str = ""
    cursor: int = 0

    def insert(self, char: str) -> None:
        self.text = self.text[: self.cursor] + char + self.text[self.cursor :]
        self.cursor += len(char)

    def backspace(self) -> bool:
        """Delete the character before the cursor. Returns False at column 0."""
        if self.cursor == 0:
            return False
        self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
        self.cursor -= 1
        return True

    def move(self, delta: int) -> bool:
        new_cursor = max(0, min(len(self.text), self.cursor + delta))
        moved = new_cursor != self.cursor
        self.cursor = new_cursor
        return moved

    def set(self, text: str) -> None:
        self.text = text
        self.cursor = len(text)

    def clear(self) -> None:
        self.text = ""
        self.cursor = 0


@dataclass
class SessionState:
    """Everything the controller owns during one editing session."""

    state: ControllerState = ControllerState.EDITING_KEY
    collection: Collection = field(default_factory=Collection)
    key_buffer: TextBuffer = field(default_factory=TextBuffer)
    value_buffer: TextBuffer = field(default_factory=TextBuffer)

    # Idle-mode list selection, None when the list is empty
    selected_index: Optional[int] = None

    # Key of the entry loaded for editing; a changed key renames the entry
    editing_original_key: Optional[str] = None

    # "Output the buffer as json? (y/n)" prompt, only meaningful while Idle
    exit_prompt_open: bool = False

    status_message: Optional[str] = None

    @property
    def focus(self) -> Optional[EditField]:
        return self.state.focus

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def focused_buffer(self) -> Optional[TextBuffer]:
        if self.focus == EditField.KEY:
            return self.key_buffer
        if self.focus == EditField.VALUE:
            return self.value_buffer
        return None

    def selected_entry(self) -> Optional[Entry]:
        if self.selected_index is None or not (
            0 <= self.selected_index < len(self.collection)
        ):
            return None
        return self.collection.entry_at(self.selected_index)

    def clamp_selection(self) -> None:
        """Keep the selection inside the entry list after it changes size."""
        if self.collection.is_empty():
            self.selected_index = None
        elif self.selected_index is None:
            self.selected_index = 0
        else:
            self.selected_index = max(
                0, min(len(self.collection) - 1, self.selected_index)
            )

    def clear_buffers(self) -> None:
        self.key_buffer.clear()
        self.value_buffer.clear()
        self.editing_original_key = None

    def copy(self) -> SessionState:
        return replace(
            self,
            collection=self.collection.copy(),
            key_buffer=replace(self.key_buffer),
            value_buffer=replace(self.value_buffer),
        )
