"""
Input controller: the key-value editor's state machine.

``transition`` is a pure function ``(session, event) -> (session, action)``
that never mutates its input. :class:`InputController` owns the current
session, applies transitions, and logs what happened.

States::

    EDITING_KEY --next_field/confirm--> EDITING_VALUE --confirm--> IDLE
    IDLE --new_entry--> EDITING_KEY      IDLE --submit--> FINALIZED
    any non-terminal --cancel--> CANCELLED

FINALIZED and CANCELLED are terminal: every later event is a no-op.
"""

from typing import TYPE_CHECKING, Iterable, Optional

from ..core.actions import ActionKind, ControllerAction
from ..core.collection import Collection
from ..core.errors import EmptyCollection, JuteError, ValidationError
from ..core.events import ControllerEvent, ControllerEventType
from ..core.session import ControllerState, SessionState

if TYPE_CHECKING:
    from .log_manager import LogManager


EventType = ControllerEventType


def transition(
    session: SessionState, event: ControllerEvent, allow_empty: bool = False
) -> tuple[SessionState, ControllerAction]:
    """Compute the next session and the action for one event.

    Args:
        session: Current session; left untouched
        event: The semantic event to apply
        allow_empty: Whether submitting an empty collection is permitted

    Returns:
        The new session (the same object when nothing changed) and the action
    """
    if session.is_terminal:
        return session, ControllerAction.none()

    new_session = session.copy()

    if event.event_type == EventType.CANCEL:
        new_session.state = ControllerState.CANCELLED
        new_session.exit_prompt_open = False
        action = ControllerAction.terminate("Cancelled, nothing exported")
    elif new_session.state.is_editing:
        action = _handle_editing(new_session, event)
    else:
        action = _handle_idle(new_session, event, allow_empty)

    if action.kind == ActionKind.NONE:
        return session, action

    new_session.status_message = action.message
    return new_session, action


def _handle_editing(session: SessionState, event: ControllerEvent) -> ControllerAction:
    buffer = session.focused_buffer()
    assert buffer is not None

    if event.event_type == EventType.CHAR:
        assert event.char is not None
        buffer.insert(event.char)
        return ControllerAction.redraw()

    if event.event_type == EventType.BACKSPACE:
        return ControllerAction.redraw() if buffer.backspace() else ControllerAction.none()

    if event.event_type in (EventType.CURSOR_LEFT, EventType.CURSOR_RIGHT):
        delta = -1 if event.event_type == EventType.CURSOR_LEFT else 1
        return ControllerAction.redraw() if buffer.move(delta) else ControllerAction.none()

    if event.event_type in (EventType.CURSOR_HOME, EventType.CURSOR_END):
        target = 0 if event.event_type == EventType.CURSOR_HOME else len(buffer.text)
        return ControllerAction.redraw() if buffer.move(target - buffer.cursor) else ControllerAction.none()

    if event.event_type == EventType.NEXT_FIELD:
        if session.state == ControllerState.EDITING_KEY:
            session.state = ControllerState.EDITING_VALUE
        else:
            session.state = ControllerState.EDITING_KEY
        return ControllerAction.redraw()

    if event.event_type == EventType.CONFIRM:
        return _confirm(session)

    if event.event_type == EventType.DISCARD_ENTRY:
        session.clear_buffers()
        session.state = ControllerState.IDLE
        session.clamp_selection()
        return ControllerAction.redraw("Entry discarded")

    return ControllerAction.none()


def _confirm(session: SessionState) -> ControllerAction:
    key = session.key_buffer.text
    if not key:
        session.state = ControllerState.EDITING_KEY
        return ControllerAction.failed(ValidationError())

    if session.state == ControllerState.EDITING_KEY:
        session.state = ControllerState.EDITING_VALUE
        return ControllerAction.redraw()

    value = session.value_buffer.text
    original_key = session.editing_original_key
    if original_key is not None and original_key != key:
        session.collection.rename(original_key, key, value)
        message = f"Renamed '{original_key}' to '{key}'"
    elif session.collection.upsert(key, value):
        message = f"Replaced '{key}'"
    else:
        message = f"Added '{key}'"

    session.clear_buffers()
    session.state = ControllerState.IDLE
    session.selected_index = session.collection.index_of(key)
    return ControllerAction.redraw(message)


def _handle_idle(
    session: SessionState, event: ControllerEvent, allow_empty: bool
) -> ControllerAction:
    if session.exit_prompt_open:
        if event.event_type == EventType.SUBMIT:
            return _submit(session, allow_empty)
        if event.event_type == EventType.DISMISS_PROMPT:
            session.exit_prompt_open = False
            return ControllerAction.redraw()
        return ControllerAction.none()

    if event.event_type == EventType.NEW_ENTRY:
        session.clear_buffers()
        session.state = ControllerState.EDITING_KEY
        return ControllerAction.redraw()

    if event.event_type == EventType.EDIT_ENTRY:
        entry = session.selected_entry()
        if entry is None:
            return ControllerAction.none()
        session.key_buffer.set(entry.key)
        session.value_buffer.set(entry.value)
        session.editing_original_key = entry.key
        session.state = ControllerState.EDITING_VALUE
        return ControllerAction.redraw()

    if event.event_type == EventType.DELETE_ENTRY:
        entry = session.selected_entry()
        if entry is None:
            return ControllerAction.none()
        session.collection.remove(entry.key)
        session.clamp_selection()
        return ControllerAction.redraw(f"Deleted '{entry.key}'")

    if event.event_type in (EventType.SELECT_PREVIOUS, EventType.SELECT_NEXT):
        if session.selected_index is None:
            return ControllerAction.none()
        delta = -1 if event.event_type == EventType.SELECT_PREVIOUS else 1
        previous = session.selected_index
        session.selected_index += delta
        session.clamp_selection()
        if session.selected_index == previous:
            return ControllerAction.none()
        return ControllerAction.redraw()

    if event.event_type == EventType.REQUEST_EXIT:
        session.exit_prompt_open = True
        return ControllerAction.redraw()

    if event.event_type == EventType.SUBMIT:
        return _submit(session, allow_empty)

    # Character input without a focused field is ignored
    return ControllerAction.none()


def _submit(session: SessionState, allow_empty: bool) -> ControllerAction:
    session.exit_prompt_open = False
    if session.collection.is_empty() and not allow_empty:
        return ControllerAction.failed(EmptyCollection())
    session.state = ControllerState.FINALIZED
    count = len(session.collection)
    return ControllerAction.terminate(f"Exporting {count} pair{'s' if count != 1 else ''}")


class InputController:
    """Owns the session and turns semantic events into state changes."""

    def __init__(
        self,
        session: Optional[SessionState] = None,
        allow_empty: bool = False,
        log_manager: Optional["LogManager"] = None,
    ):
        self._session = session or SessionState()
        self.allow_empty = allow_empty
        self.log_manager = log_manager

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def state(self) -> ControllerState:
        return self._session.state

    @property
    def collection(self) -> Collection:
        return self._session.collection

    def handle_event(self, event: ControllerEvent) -> ControllerAction:
        """Apply one event and report what the rendering surface should do."""
        previous_state = self._session.state
        self._session, action = transition(self._session, event, self.allow_empty)
        self._log_transition(event, previous_state, action)
        return action

    def handle_events(self, events: Iterable[ControllerEvent]) -> list[ControllerAction]:
        return [self.handle_event(event) for event in events]

    def finalize(self) -> Collection:
        """Return the collection as of now.

        Empty collections are rejected with :class:`EmptyCollection` unless the
        controller was created with ``allow_empty=True``, in which case the
        export is ``{}``.
        """
        if self._session.state == ControllerState.CANCELLED:
            raise JuteError("Session was cancelled")
        if self._session.collection.is_empty() and not self.allow_empty:
            raise EmptyCollection()
        return self._session.collection.copy()

    def _log_transition(
        self,
        event: ControllerEvent,
        previous_state: ControllerState,
        action: ControllerAction,
    ) -> None:
        if not self.log_manager:
            return

        if action.kind != ActionKind.NONE and previous_state != self._session.state:
            self.log_manager.debug(
                f"{event.event_type.name}: {previous_state.name} -> {self._session.state.name}"
            )

        if action.is_failure:
            self.log_manager.warning(action.message or str(action.error))
        elif action.message:
            if action.should_terminate:
                self.log_manager.system(action.message)
            else:
                self.log_manager.edit(action.message)
