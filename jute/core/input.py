from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional, Any, Union


class InputType(Enum):
    KEY_PRESS = auto()
    QUIT = auto()


class Key(Enum):
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()
    ENTER = auto()
    ESCAPE = auto()
    TAB = auto()
    BACKSPACE = auto()
    DELETE = auto()
    HOME = auto()
    END = auto()

    # A printable character, carried in InputEvent.char
    CHAR = auto()

    UNKNOWN = auto()


# What a key-binding table is indexed by: a named key, or a single character
KeyBinding = Union[Key, str]


@dataclass
class InputEvent:
    event_type: InputType
    key: Optional[Key] = None
    char: Optional[str] = None
    ctrl: bool = False
    alt: bool = False
    raw_data: Optional[Any] = None

    @classmethod
    def quit_event(cls) -> "InputEvent":
        return cls(event_type=InputType.QUIT)

    @classmethod
    def key_press(cls, key: Key, ctrl: bool = False, alt: bool = False) -> "InputEvent":
        return cls(
            event_type=InputType.KEY_PRESS,
            key=key,
            ctrl=ctrl,
            alt=alt
        )

    @classmethod
    def char_press(cls, char: str) -> "InputEvent":
        return cls(event_type=InputType.KEY_PRESS, key=Key.CHAR, char=char)

    @property
    def binding(self) -> Optional[KeyBinding]:
        """Lookup key for binding tables. Letters are matched case-insensitively."""
        if self.key == Key.CHAR and self.char:
            return self.char.lower()
        return self.key

    def is_printable(self) -> bool:
        return self.key == Key.CHAR and self.char is not None and self.char.isprintable()
