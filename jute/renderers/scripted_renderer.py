from typing import Iterable, Optional

from ..core.renderer import Renderer, RendererConfig
from ..core.renderable import RenderContext
from ..core.input import InputEvent, Key


class ScriptedRenderer(Renderer):
    """Replays a fixed list of input events and records every frame.

    Used for demos and end-to-end tests. Each read returns one event, like a
    blocking terminal read. Once the script runs out a quit event is returned
    so the session always ends.
    """

    def __init__(self, events: Iterable[InputEvent], config: Optional[RendererConfig] = None,
                 echo: bool = False):
        super().__init__(config)
        self._events = list(events)
        self._position = 0
        self._echo = echo
        self.frames: list[RenderContext] = []
        self.initialized = False
        self.cleaned_up = False

    def initialize(self) -> None:
        self.initialized = True

    def cleanup(self) -> None:
        self.cleaned_up = True

    def clear(self) -> None:
        pass

    def present(self) -> None:
        pass

    def render_frame(self, context: RenderContext) -> None:
        self.frames.append(context)
        if self._echo:
            self._print_frame(context)

    def _print_frame(self, context: RenderContext) -> None:
        out = self.config.stream
        print(f"--- Frame {len(self.frames)}: {context.mode_label} | {context.editing_label} ---",
              file=out)
        for entry in context.entries:
            marker = ">" if entry.selected else " "
            print(f"{marker} {entry.key: <25} : {entry.value}", file=out)
        if context.editor:
            print(f"  [Key: {context.editor.key_text}] [Value: {context.editor.value_text}]",
                  file=out)
        if context.dialog:
            print(f"  {context.dialog.message}", file=out)
        if context.status:
            print(f"  ({context.status.text})", file=out)

    def get_input_events(self) -> list[InputEvent]:
        if self._position >= len(self._events):
            return [InputEvent.quit_event()]
        event = self._events[self._position]
        self._position += 1
        return [event]

    @property
    def remaining(self) -> int:
        return len(self._events) - self._position


def keys_for_text(text: str) -> list[InputEvent]:
    """Input events that type ``text``; ``\\n`` becomes ENTER and ``\\t`` TAB."""
    events = []
    for char in text:
        if char == "\n":
            events.append(InputEvent.key_press(Key.ENTER))
        elif char == "\t":
            events.append(InputEvent.key_press(Key.TAB))
        else:
            events.append(InputEvent.char_press(char))
    return events
