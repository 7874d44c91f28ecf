"""Application layer: controller, exporter, input routing and the event loop.

- controller.py: the editor state machine
- exporter.py: JSON serialization and sink writes
- input_handler.py: key press to controller event routing
- render_builder.py: session to RenderContext
- log_manager.py: categorised in-memory session log
- application.py: wiring and the main loop
"""

from .controller import InputController, transition
from .exporter import Exporter, coerce_value, serialize, write
from .log_manager import LogCategory, LogLevel, LogManager

__all__ = [
    "InputController",
    "transition",
    "Exporter",
    "coerce_value",
    "serialize",
    "write",
    "LogCategory",
    "LogLevel",
    "LogManager",
]
