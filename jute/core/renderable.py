from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional


class StatusLevel(Enum):
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass
class EntryRenderData:
    key: str
    value: str
    selected: bool = False


@dataclass
class EditorRenderData:
    """The key/value popup shown while an entry is being edited."""
    key_text: str
    value_text: str
    key_focused: bool           # False means the value box has focus
    cursor: int                 # Cursor column inside the focused box
    title: str = "Enter a new key-value pair"


@dataclass
class DialogRenderData:
    """Confirmation dialog drawn over a cleared screen."""
    title: str
    message: str


@dataclass
class StatusRenderData:
    text: str
    level: StatusLevel = StatusLevel.INFO


@dataclass
class RenderContext:
    """Snapshot of everything a renderer needs to draw one frame."""
    title: str = ""
    entries: list[EntryRenderData] = field(default_factory=list)
    mode_label: str = ""
    editing_label: str = ""
    key_hint: str = ""
    editor: Optional[EditorRenderData] = None
    dialog: Optional[DialogRenderData] = None
    status: Optional[StatusRenderData] = None
