"""
Input handling: raw key presses in, controller events out.

The active InputContext picks the binding table. A bound key becomes its
controller event; in the editing context an unbound printable key becomes
text. Everything else is dropped.
"""

from typing import TYPE_CHECKING, Iterable, Optional

from ..core.actions import ControllerAction
from ..core.events import ControllerEvent, ControllerEventType
from ..core.input import InputEvent, InputType
from ..core.input_system import InputContextManager, KeyConfigLoader

if TYPE_CHECKING:
    from .controller import InputController
    from .log_manager import LogManager


class InputHandler:
    """Routes input events to the controller using the key configuration."""

    def __init__(
        self,
        controller: "InputController",
        key_config: KeyConfigLoader,
        log_manager: Optional["LogManager"] = None,
    ):
        self.controller = controller
        self.key_config = key_config
        self.log_manager = log_manager

    def translate(self, event: InputEvent) -> Optional[ControllerEvent]:
        """Map one input event to a controller event, or None if unbound."""
        if event.event_type == InputType.QUIT:
            return ControllerEvent.of(ControllerEventType.CANCEL)

        context = InputContextManager.get_current_context(self.controller.session)
        if context is None:
            return None

        event_type = self.key_config.get_event_for_key(event.binding, context)
        if event_type is not None:
            return ControllerEvent.of(event_type)

        if InputContextManager.accepts_text(context) and event.is_printable():
            assert event.char is not None
            return ControllerEvent.character(event.char)

        return None

    def handle_input_events(self, events: Iterable[InputEvent]) -> list[ControllerAction]:
        """Process input events in order, stopping once the session ends."""
        actions = []
        for event in events:
            controller_event = self.translate(event)
            if self.log_manager:
                self.log_manager.input(
                    f"{event.key.name if event.key else event.event_type.name}"
                    f"{' ' + repr(event.char) if event.char else ''}"
                    f" -> {controller_event.event_type.name if controller_event else 'unbound'}"
                )
            if controller_event is None:
                continue

            action = self.controller.handle_event(controller_event)
            actions.append(action)
            if action.should_terminate:
                break
        return actions
