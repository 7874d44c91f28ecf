"""Builds the RenderContext for a frame from the controller's session."""

from typing import TYPE_CHECKING, Optional

from ..core.actions import ControllerAction
from ..core.events import ControllerEventType
from ..core.input import Key, KeyBinding
from ..core.input_system import InputContext, InputContextManager, KeyConfigLoader
from ..core.renderable import (
    DialogRenderData,
    EditorRenderData,
    EntryRenderData,
    RenderContext,
    StatusLevel,
    StatusRenderData,
)
from ..core.session import ControllerState, EditField, SessionState

if TYPE_CHECKING:
    from .log_manager import LogManager


# (event, label) pairs shown in the key-hint footer, per context
HINTS = {
    InputContext.IDLE: [
        (ControllerEventType.NEW_ENTRY, "make new pair"),
        (ControllerEventType.EDIT_ENTRY, "edit"),
        (ControllerEventType.DELETE_ENTRY, "delete"),
        (ControllerEventType.SUBMIT, "save"),
        (ControllerEventType.REQUEST_EXIT, "quit"),
    ],
    InputContext.EDITING: [
        (ControllerEventType.DISCARD_ENTRY, "cancel"),
        (ControllerEventType.NEXT_FIELD, "switch boxes"),
        (ControllerEventType.CONFIRM, "complete"),
    ],
    InputContext.EXIT_PROMPT: [
        (ControllerEventType.SUBMIT, "output json"),
        (ControllerEventType.CANCEL, "discard"),
        (ControllerEventType.DISMISS_PROMPT, "back"),
    ],
}

KEY_LABELS = {
    Key.ENTER: "ENTER",
    Key.ESCAPE: "ESC",
    Key.TAB: "Tab",
    Key.BACKSPACE: "Bksp",
    Key.DELETE: "Del",
}


# Status colour for log lines shown when the controller has nothing to say
STATUS_LEVELS = {
    "WARNING": StatusLevel.WARNING,
    "ERROR": StatusLevel.ERROR,
}


def format_binding(binding: KeyBinding) -> str:
    if isinstance(binding, Key):
        return KEY_LABELS.get(binding, binding.name.title())
    return binding


class RenderBuilder:
    """Translates session state into renderer-agnostic draw data."""

    def __init__(self, key_config: KeyConfigLoader, title: str = "",
                 log_manager: Optional["LogManager"] = None):
        self.key_config = key_config
        self.title = title
        self.log_manager = log_manager

    def build_render_context(self, session: SessionState,
                             last_action: Optional[ControllerAction] = None) -> RenderContext:
        context = InputContextManager.get_current_context(session)

        return RenderContext(
            title=self.title,
            entries=self._build_entries(session),
            mode_label=self._mode_label(session),
            editing_label=self._editing_label(session),
            key_hint=self._key_hint(context),
            editor=self._build_editor(session),
            dialog=self._build_dialog(session),
            status=self._build_status(session, last_action),
        )

    def _build_entries(self, session: SessionState) -> list[EntryRenderData]:
        show_selection = session.state == ControllerState.IDLE
        return [
            EntryRenderData(
                key=entry.key,
                value=entry.value,
                selected=show_selection and index == session.selected_index,
            )
            for index, entry in enumerate(session.collection)
        ]

    def _mode_label(self, session: SessionState) -> str:
        if session.state.is_editing:
            return "Editing Mode"
        if session.exit_prompt_open or session.is_terminal:
            return "Exiting"
        return "Normal Mode"

    def _editing_label(self, session: SessionState) -> str:
        if session.focus == EditField.KEY:
            return "Editing Json Key"
        if session.focus == EditField.VALUE:
            return "Editing Json Value"
        return "Not Editing Anything"

    def _key_hint(self, context: Optional[InputContext]) -> str:
        if context is None:
            return ""
        parts = []
        for event_type, label in HINTS[context]:
            keys = self.key_config.get_keys_for_event(event_type, context)
            if keys:
                parts.append(f"({format_binding(keys[0])}) to {label}")
        return " / ".join(parts)

    def _build_editor(self, session: SessionState) -> Optional[EditorRenderData]:
        if not session.state.is_editing:
            return None
        buffer = session.focused_buffer()
        title = ("Edit key-value pair" if session.editing_original_key is not None
                 else "Enter a new key-value pair")
        return EditorRenderData(
            key_text=session.key_buffer.text,
            value_text=session.value_buffer.text,
            key_focused=session.focus == EditField.KEY,
            cursor=buffer.cursor if buffer else 0,
            title=title,
        )

    def _build_dialog(self, session: SessionState) -> Optional[DialogRenderData]:
        if not session.exit_prompt_open:
            return None
        return DialogRenderData(
            title="Exit",
            message="Would you like to output the buffer as json? (y/n)",
        )

    def _build_status(self, session: SessionState,
                      last_action: Optional[ControllerAction]) -> Optional[StatusRenderData]:
        """The controller's message for the last event, else the latest visible log line."""
        if session.status_message:
            level = StatusLevel.INFO
            if last_action is not None and last_action.is_failure:
                level = StatusLevel.WARNING
            return StatusRenderData(text=session.status_message, level=level)

        message = self.log_manager.latest() if self.log_manager else None
        if message is None:
            return None
        return StatusRenderData(text=message.text,
                                level=STATUS_LEVELS.get(message.category.name, StatusLevel.INFO))
