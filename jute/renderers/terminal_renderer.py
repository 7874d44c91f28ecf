import codecs
import os
import select
import shutil
import sys
import termios
import tty
from typing import Optional

from ..core.errors import TerminalError
from ..core.renderer import Renderer, RendererConfig
from ..core.renderable import (
    RenderContext, EditorRenderData, DialogRenderData, StatusLevel
)
from ..core.input import InputEvent, InputType, Key


# How long to wait for the rest of an escape sequence before treating ESC as a key
ESCAPE_TIMEOUT = 0.05

# Longest CSI sequence read before giving up on its final byte
MAX_ESCAPE_LENGTH = 16

ESCAPE_SEQUENCES = {
    '[A': Key.UP,
    '[B': Key.DOWN,
    '[C': Key.RIGHT,
    '[D': Key.LEFT,
    '[H': Key.HOME,
    '[F': Key.END,
    'OH': Key.HOME,
    'OF': Key.END,
    '[1~': Key.HOME,
    '[4~': Key.END,
    '[3~': Key.DELETE,
}


class TerminalRenderer(Renderer):
    """Draws the editor with ANSI escape codes and reads keys from a raw TTY.

    Frames go to ``config.stream`` (stderr by default) so the exported JSON
    can be piped from stdout.
    """

    def __init__(self, config: Optional[RendererConfig] = None, input_fd: Optional[int] = None):
        super().__init__(config)
        self._input_fd = input_fd
        self._old_settings = None
        self._buffer: list[str] = []
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')

        self.terminal_codes = {
            "reset": "\033[0m",
            "clear_screen": "\033[2J",
            "cursor_home": "\033[H",
            "hide_cursor": "\033[?25l",
            "show_cursor": "\033[?25h",
            "enter_alt_screen": "\033[?1049h",
            "leave_alt_screen": "\033[?1049l",
            "reverse": "\033[7m",
            "text_normal": "\033[97m",
            "text_dim": "\033[90m",
            "text_green": "\033[92m",
            "text_light_green": "\033[32m",
            "text_yellow": "\033[93m",
            "text_red": "\033[91m",
            "text_light_red": "\033[1;91m",
            "text_white": "\033[97m",
            "text_italic_bold": "\033[1;3m",
            "list_background": "\033[48;2;15;15;15m",
            "popup_background": "\033[100m",
            "active_box": "\033[103;30m",
            "exit_box": "\033[48;2;123;3;35;96m",
        }

        self.box_chars = {
            "square": ("┌", "┐", "└", "┘", "─", "│"),
            "rounded": ("╭", "╮", "╰", "╯", "─", "│"),
        }

    @property
    def input_fd(self) -> int:
        return self._input_fd if self._input_fd is not None else sys.stdin.fileno()

    def _write(self, text: str) -> None:
        self.config.stream.write(text)
        self.config.stream.flush()

    def initialize(self) -> None:
        if not os.isatty(self.input_fd):
            raise TerminalError("jute needs an interactive terminal on stdin")
        self._old_settings = termios.tcgetattr(self.input_fd)
        tty.setraw(self.input_fd)
        self._write(self.terminal_codes["enter_alt_screen"] + self.terminal_codes["hide_cursor"])
        self.clear()

    def cleanup(self) -> None:
        if self._old_settings:
            termios.tcsetattr(self.input_fd, termios.TCSADRAIN, self._old_settings)
            self._old_settings = None
            self._write(
                self.terminal_codes["reset"]
                + self.terminal_codes["show_cursor"]
                + self.terminal_codes["leave_alt_screen"]
            )

    def clear(self) -> None:
        self._write(self.terminal_codes["clear_screen"] + self.terminal_codes["cursor_home"])

    def present(self) -> None:
        # Raw mode needs explicit carriage returns
        self._write(self.terminal_codes["cursor_home"] + "\r\n".join(self._buffer))
        self._buffer.clear()

    def get_screen_size(self) -> tuple[int, int]:
        size = shutil.get_terminal_size((self.config.width, self.config.height))
        return (size.columns, size.lines)

    # ============== Frame composition ==============

    def render_frame(self, context: RenderContext) -> None:
        self._buffer.clear()
        screen_width, screen_height = self.get_screen_size()

        grid = [[' ' for _ in range(screen_width)] for _ in range(screen_height)]
        colors = [['' for _ in range(screen_width)] for _ in range(screen_height)]

        if context.dialog:
            # The exit prompt clears everything behind it
            self._render_dialog(context.dialog, grid, colors, screen_width, screen_height)
        else:
            self._render_main_layout(context, grid, colors, screen_width, screen_height)

        for y in range(screen_height):
            line = []
            for x in range(screen_width):
                if colors[y][x]:
                    line.append(colors[y][x] + grid[y][x] + self.terminal_codes["reset"])
                else:
                    line.append(grid[y][x])
            self._buffer.append(''.join(line))

    def _render_main_layout(self, context: RenderContext, grid: list[list[str]],
                            colors: list[list[str]], width: int, height: int) -> None:
        """Title (3 lines), entry list (rest), two footers (3 lines)."""
        title_height = 3
        footer_height = 3
        list_y = title_height
        list_height = max(1, height - title_height - footer_height)
        footer_y = list_y + list_height

        # Title block
        self._draw_box(grid, colors, 0, 0, width, title_height, self.terminal_codes["text_dim"])
        self._put_text(grid, colors, max(1, (width - len(context.title)) // 2), 1,
                       context.title, self.terminal_codes["text_green"], width - 2)

        # Entry list on a dark background, status on its last line
        status_rows = 1 if context.status else 0
        self._fill(colors, 0, list_y, width, list_height, self.terminal_codes["list_background"])
        for row, entry in enumerate(context.entries[:max(0, list_height - status_rows)]):
            text = f"{entry.key: <25} : {entry.value}"
            color = self.terminal_codes["text_yellow"] + self.terminal_codes["list_background"]
            if entry.selected:
                color = self.terminal_codes["reverse"] + self.terminal_codes["text_yellow"]
            self._put_text(grid, colors, 0, list_y + row, text, color, width)

        if context.status:
            status_color = {
                StatusLevel.INFO: self.terminal_codes["text_green"],
                StatusLevel.WARNING: self.terminal_codes["text_yellow"],
                StatusLevel.ERROR: self.terminal_codes["text_red"],
            }[context.status.level]
            self._put_text(grid, colors, 1, list_y + list_height - 1, context.status.text,
                           status_color + self.terminal_codes["list_background"], width - 2)

        # Footers: mode on the left, key hints on the right
        half = width // 2
        self._draw_box(grid, colors, 0, footer_y, half, footer_height, self.terminal_codes["text_dim"])
        self._draw_box(grid, colors, half, footer_y, width - half, footer_height,
                       self.terminal_codes["text_dim"])

        mode_color = {
            "Normal Mode": self.terminal_codes["text_green"],
            "Editing Mode": self.terminal_codes["text_yellow"],
            "Exiting": self.terminal_codes["text_light_red"],
        }.get(context.mode_label, self.terminal_codes["text_normal"])
        x = self._put_text(grid, colors, 1, footer_y + 1, context.mode_label, mode_color, half - 2)
        x = self._put_text(grid, colors, x, footer_y + 1, " | ", self.terminal_codes["text_white"],
                           half - 1 - x)
        editing_color = (self.terminal_codes["text_dim"]
                         if context.editing_label == "Not Editing Anything"
                         else self.terminal_codes["text_light_green"])
        self._put_text(grid, colors, x, footer_y + 1, context.editing_label, editing_color,
                       half - 1 - x)
        self._put_text(grid, colors, half + 1, footer_y + 1, context.key_hint,
                       self.terminal_codes["text_red"], width - half - 2)

        if context.editor:
            self._render_editor(context.editor, grid, colors, width, height)

    def _render_editor(self, editor: EditorRenderData, grid: list[list[str]],
                       colors: list[list[str]], width: int, height: int) -> None:
        """Popup with Key and Value boxes side by side; the focused one is highlighted."""
        x, y, w, h = self._centered_rect(60, 25, width, height)
        h = max(h, 5)
        self._fill(colors, x, y, w, h, self.terminal_codes["popup_background"])
        for i in range(w):
            grid[y][x + i] = ' '
        self._put_text(grid, colors, x, y, editor.title, self.terminal_codes["popup_background"], w)

        inner_w = w - 2
        box_w = inner_w // 2
        boxes = [
            (x + 1, "Key", editor.key_text, editor.key_focused),
            (x + 1 + box_w, "Value", editor.value_text, not editor.key_focused),
        ]
        for box_x, label, text, focused in boxes:
            color = (self.terminal_codes["active_box"] if focused
                     else self.terminal_codes["popup_background"])
            box_h = h - 2
            self._fill(colors, box_x, y + 1, box_w, box_h, color)
            self._draw_box(grid, colors, box_x, y + 1, box_w, box_h, color, title=label,
                           title_color=color + self.terminal_codes["text_italic_bold"])

            # Scroll long text so the cursor stays visible
            visible = box_w - 2
            cursor = editor.cursor if focused else len(text)
            offset = max(0, cursor - visible + 1)
            self._put_text(grid, colors, box_x + 1, y + 2, text[offset:offset + visible], color,
                           visible)
            if focused:
                cx = box_x + 1 + cursor - offset
                if 0 <= cx < width and y + 2 < height:
                    colors[y + 2][cx] = self.terminal_codes["reverse"]

    def _render_dialog(self, dialog: DialogRenderData, grid: list[list[str]],
                       colors: list[list[str]], width: int, height: int) -> None:
        x, y, w, h = self._centered_rect(60, 25, width, height)
        h = max(h, 5)
        color = self.terminal_codes["exit_box"]
        self._fill(colors, x, y, w, h, color)
        self._draw_box(grid, colors, x, y, w, h, color, title=dialog.title, style="rounded",
                       centered_title=True)

        # Word wrap without trimming, inside a padding of 2
        inner_w = max(1, w - 6)
        words = dialog.message.split(' ')
        lines: list[str] = []
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if len(candidate) > inner_w and current:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
        for row, line in enumerate(lines[:max(0, h - 4)]):
            self._put_text(grid, colors, x + 3, y + 2 + row, line,
                           color + self.terminal_codes["text_white"], inner_w)

    # ============== Grid helpers ==============

    @staticmethod
    def _centered_rect(percent_x: int, percent_y: int, width: int,
                       height: int) -> tuple[int, int, int, int]:
        """Rectangle using a percentage of the screen, centered."""
        w = max(10, width * percent_x // 100)
        h = max(3, height * percent_y // 100)
        w = min(w, width)
        h = min(h, height)
        return ((width - w) // 2, (height - h) // 2, w, h)

    def _put_text(self, grid: list[list[str]], colors: list[list[str]], x: int, y: int,
                  text: str, color: str, max_width: int) -> int:
        """Write text clipped to max_width; returns the column after the last char."""
        if not (0 <= y < len(grid)):
            return x
        for char in text[:max(0, max_width)]:
            if 0 <= x < len(grid[y]):
                grid[y][x] = char if char.isprintable() else '?'
                colors[y][x] = color
            x += 1
        return x

    def _fill(self, colors: list[list[str]], x: int, y: int, w: int, h: int, color: str) -> None:
        for row in range(y, min(y + h, len(colors))):
            for col in range(x, min(x + w, len(colors[row]))):
                colors[row][col] = color

    def _draw_box(self, grid: list[list[str]], colors: list[list[str]], x: int, y: int,
                  w: int, h: int, color: str, title: str = "", title_color: Optional[str] = None,
                  style: str = "square", centered_title: bool = False) -> None:
        if w < 2 or h < 2:
            return
        tl, tr, bl, br, horizontal, vertical = self.box_chars[style]
        max_y = len(grid)
        max_x = len(grid[0]) if grid else 0

        def put(px: int, py: int, char: str) -> None:
            if 0 <= px < max_x and 0 <= py < max_y:
                grid[py][px] = char
                colors[py][px] = color

        for i in range(1, w - 1):
            put(x + i, y, horizontal)
            put(x + i, y + h - 1, horizontal)
        for j in range(1, h - 1):
            put(x, y + j, vertical)
            put(x + w - 1, y + j, vertical)
        put(x, y, tl)
        put(x + w - 1, y, tr)
        put(x, y + h - 1, bl)
        put(x + w - 1, y + h - 1, br)

        if title:
            title_x = x + (w - len(title)) // 2 if centered_title else x + 1
            self._put_text(grid, colors, title_x, y, title, title_color or color, w - 2)

    # ============== Input ==============

    def _read_byte(self, timeout: Optional[float] = None) -> Optional[bytes]:
        ready, _, _ = select.select([self.input_fd], [], [], timeout)
        if not ready:
            return None
        data = os.read(self.input_fd, 1)
        if not data:
            # EOF on the terminal
            return None
        return data

    def _read_char(self, timeout: Optional[float] = None) -> Optional[str]:
        """Read one decoded character, assembling multi-byte UTF-8 sequences."""
        while True:
            data = self._read_byte(timeout)
            if data is None:
                return None
            char = self._decoder.decode(data)
            if char:
                return char

    def _read_escape_sequence(self) -> InputEvent:
        """Consume everything that follows ESC as one event.

        ``ESC [`` (CSI) runs until a final byte in ``@``..``~``; ``ESC O``
        (SS3) takes one more character; ESC before anything else is Alt+key.
        A lone ESC is the Escape key.
        """
        intro = self._read_char(ESCAPE_TIMEOUT)
        if intro is None:
            return InputEvent.key_press(Key.ESCAPE)

        if intro == '[':
            sequence = intro
            while len(sequence) < MAX_ESCAPE_LENGTH:
                char = self._read_char(ESCAPE_TIMEOUT)
                if char is None:
                    break
                sequence += char
                if '@' <= char <= '~':
                    break
        elif intro == 'O':
            sequence = intro + (self._read_char(ESCAPE_TIMEOUT) or '')
        else:
            return InputEvent(InputType.KEY_PRESS, key=Key.UNKNOWN, alt=True, raw_data=intro)

        if sequence in ESCAPE_SEQUENCES:
            return InputEvent.key_press(ESCAPE_SEQUENCES[sequence])
        return InputEvent(InputType.KEY_PRESS, key=Key.UNKNOWN, raw_data=sequence)

    def get_input_events(self) -> list[InputEvent]:
        key = self._read_char()
        if key is None:
            # stdin closed: nothing more will ever arrive
            return [InputEvent.quit_event()]

        if key == '\x1b':
            return [self._read_escape_sequence()]
        if key in ('\r', '\n'):
            return [InputEvent.key_press(Key.ENTER)]
        if key == '\t':
            return [InputEvent.key_press(Key.TAB)]
        if key in ('\x7f', '\x08'):
            return [InputEvent.key_press(Key.BACKSPACE)]
        if key == '\x03':
            # Ctrl-C arrives as a byte in raw mode
            return [InputEvent.quit_event()]
        if key.isprintable():
            return [InputEvent.char_press(key)]
        return [InputEvent.key_press(Key.UNKNOWN, ctrl=True)]
