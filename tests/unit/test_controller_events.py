"""
Unit tests for controller events and actions.
"""
import pytest

from jute.core.actions import ActionKind, ControllerAction
from jute.core.errors import EmptyCollection
from jute.core.events import ControllerEvent, ControllerEventType as EventType, text


class TestControllerEvent:

    def test_character(self):
        event = ControllerEvent.character("x")
        assert event.event_type == EventType.CHAR
        assert event.char == "x"

    @pytest.mark.parametrize("char", [None, "", "ab"])
    def test_char_requires_one_character(self, char):
        with pytest.raises(ValueError):
            ControllerEvent(EventType.CHAR, char)

    def test_other_events_carry_no_character(self):
        with pytest.raises(ValueError):
            ControllerEvent(EventType.CONFIRM, "x")

    def test_from_name(self):
        assert ControllerEvent.from_name("confirm") == ControllerEvent.of(EventType.CONFIRM)
        assert ControllerEvent.from_name("NEXT_FIELD").event_type == EventType.NEXT_FIELD

    def test_from_unknown_name(self):
        with pytest.raises(ValueError, match="fly"):
            ControllerEvent.from_name("fly")

    def test_events_are_hashable_values(self):
        assert {ControllerEvent.character("a"), ControllerEvent.character("a")} == {
            ControllerEvent.character("a")
        }

    def test_text_expands_characters(self):
        events = text("héllo")
        assert [event.char for event in events] == list("héllo")
        assert text("") == []


class TestControllerAction:

    def test_redraw(self):
        action = ControllerAction.redraw("ok")
        assert action.kind == ActionKind.REDRAW
        assert action.message == "ok"
        assert not action.is_failure
        assert not action.should_terminate

    def test_failed_carries_error(self):
        error = EmptyCollection()
        action = ControllerAction.failed(error)

        assert action.is_failure
        assert action.error is error
        assert action.message == str(error)
        assert action.kind == ActionKind.REDRAW

    def test_terminate(self):
        assert ControllerAction.terminate().should_terminate
        assert ControllerAction.none().kind == ActionKind.NONE
