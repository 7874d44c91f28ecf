"""
Application wiring and the main event loop.

One loop iteration draws the current session, blocks for input, and feeds
the controller. When the session finalizes the terminal is restored first and
only then is the collection exported, so the JSON never mixes with screen
output.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import BinaryIO, Optional

from ..core.actions import ControllerAction
from ..core.renderer import Renderer
from ..core.session import ControllerState
from ..core.input_system import KeyConfigLoader
from .controller import InputController
from .exporter import Exporter
from .input_handler import InputHandler
from .log_manager import LogLevel, LogManager
from .render_builder import RenderBuilder


@dataclass
class AppConfig:
    output: Optional[str] = None        # None or "-" means stdout
    typed: bool = False
    allow_empty: bool = False
    indent: Optional[int] = None
    key_config_path: Optional[str] = None
    key_scheme: Optional[str] = None
    log_file: Optional[str] = None
    debug: bool = False


class SessionOutcome(Enum):
    """How a run ended."""
    EXPORTED = auto()
    CANCELLED = auto()


class Application:
    """Owns the collaborators for one interactive session."""

    def __init__(self, renderer: Renderer, config: Optional[AppConfig] = None,
                 stdout: Optional[BinaryIO] = None):
        self.renderer = renderer
        self.config = config or AppConfig()
        self.running = False
        self.last_action: Optional[ControllerAction] = None

        self.log_manager = LogManager(
            default_level=LogLevel.DEBUG if self.config.debug else LogLevel.INFO
        )

        self.key_config = KeyConfigLoader(self.config.key_config_path, self.log_manager)
        self.key_config.load_config()
        if self.config.key_scheme and not self.key_config.set_active_scheme(self.config.key_scheme):
            self.log_manager.warning(f"Unknown key scheme '{self.config.key_scheme}', using default")

        self.controller = InputController(
            allow_empty=self.config.allow_empty, log_manager=self.log_manager
        )
        self.input_handler = InputHandler(self.controller, self.key_config, self.log_manager)
        self.render_builder = RenderBuilder(
            self.key_config, title=renderer.config.title, log_manager=self.log_manager
        )
        self.exporter = Exporter(
            sink=self.config.output,
            typed=self.config.typed,
            indent=self.config.indent,
            log_manager=self.log_manager,
            stdout=stdout,
        )

    def initialize(self) -> None:
        self.renderer.start()
        self.running = True
        self.log_manager.system("Session started")

    def cleanup(self) -> None:
        self.running = False
        self.renderer.stop()

    def run(self) -> SessionOutcome:
        """Run the session to completion and export if it was submitted.

        Raises:
            ExportError: the finalized collection could not be written
        """
        try:
            self.initialize()
            while self.running:
                self.render()
                self.update()
        finally:
            self.cleanup()

        try:
            return self.finish()
        finally:
            if self.config.log_file:
                self.log_manager.save_log_to_file(self.config.log_file)

    def update(self) -> None:
        """Read input and apply it to the controller."""
        events = self.renderer.get_input_events()
        actions = self.input_handler.handle_input_events(events)
        if actions:
            self.last_action = actions[-1]
        if self.controller.session.is_terminal:
            self.running = False

    def render(self) -> None:
        context = self.render_builder.build_render_context(
            self.controller.session, self.last_action
        )
        self.renderer.clear()
        self.renderer.render_frame(context)
        self.renderer.present()

    def finish(self) -> SessionOutcome:
        if self.controller.state != ControllerState.FINALIZED:
            self.log_manager.system("Session ended without export")
            return SessionOutcome.CANCELLED

        self.exporter.export(self.controller.finalize())
        return SessionOutcome.EXPORTED
