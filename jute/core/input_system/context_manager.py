"""
Input context management.

The active context decides which key-binding table applies to a key press.
It is derived from the session state on every lookup, never stored.
"""
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..session import SessionState


class InputContext(Enum):
    """Input context defines which keys are active and what they do."""
    EDITING = "editing"
    IDLE = "idle"
    EXIT_PROMPT = "exit_prompt"


class InputContextManager:
    """Determines the active input context from session state."""

    @staticmethod
    def get_current_context(session: Optional["SessionState"]) -> Optional[InputContext]:
        """
        Determine the input context for a session.

        Args:
            session: The session to inspect

        Returns:
            InputContext: The active context, or None once the session has ended
        """
        if session is None or session.is_terminal:
            return None
        if session.state.is_editing:
            return InputContext.EDITING
        if session.exit_prompt_open:
            return InputContext.EXIT_PROMPT
        return InputContext.IDLE

    @staticmethod
    def accepts_text(context: Optional[InputContext]) -> bool:
        """Only the editing context turns unbound printable keys into text."""
        return context == InputContext.EDITING
