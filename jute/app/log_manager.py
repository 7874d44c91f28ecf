"""
Session log.

Every message is buffered (bounded) with its category and time. Reads are
filtered by enabled categories and by level, so switching debug on later
reveals what was already recorded. The visible messages can be written to a
file when the session ends.
"""
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional


class LogLevel(Enum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


class LogCategory(Enum):
    """What a message is about. The value is the short tag used on display."""
    SYSTEM = "SYS"      # Session start/end, terminal, log file
    INPUT = "INP"       # Raw keys and the event they mapped to
    EDIT = "EDT"        # Pairs added, replaced, renamed, deleted
    EXPORT = "EXP"      # Document written
    CONFIG = "CFG"      # Key binding file
    DEBUG = "DBG"       # State transitions
    WARNING = "WRN"     # Rejected input, bad config entries
    ERROR = "ERR"       # Failed writes

    @property
    def level(self) -> LogLevel:
        return CATEGORY_LEVELS.get(self, LogLevel.INFO)


CATEGORY_LEVELS = {
    LogCategory.INPUT: LogLevel.DEBUG,
    LogCategory.CONFIG: LogLevel.DEBUG,
    LogCategory.DEBUG: LogLevel.DEBUG,
    LogCategory.WARNING: LogLevel.WARNING,
    LogCategory.ERROR: LogLevel.ERROR,
}


@dataclass
class LogMessage:
    text: str
    category: LogCategory
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self, include_timestamp: bool = False, include_category: bool = True) -> str:
        prefix = ""
        if include_timestamp:
            prefix += self.timestamp.strftime("[%H:%M:%S] ")
        if include_category:
            prefix += f"[{self.category.value}] "
        return prefix + self.text


class LogManager:
    """Bounded, categorised message buffer for one session."""

    def __init__(self, max_messages: int = 1000, default_level: LogLevel = LogLevel.INFO):
        self.messages: deque[LogMessage] = deque(maxlen=max_messages)
        self.log_level = default_level
        self.enabled_categories = set(LogCategory)

    def log(self, text: str, category: LogCategory = LogCategory.SYSTEM) -> None:
        self.messages.append(LogMessage(text, category))

    # One shortcut per category
    def system(self, text: str) -> None:
        self.log(text, LogCategory.SYSTEM)

    def input(self, text: str) -> None:
        self.log(text, LogCategory.INPUT)

    def edit(self, text: str) -> None:
        self.log(text, LogCategory.EDIT)

    def export(self, text: str) -> None:
        self.log(text, LogCategory.EXPORT)

    def config(self, text: str) -> None:
        self.log(text, LogCategory.CONFIG)

    def debug(self, text: str) -> None:
        self.log(text, LogCategory.DEBUG)

    def warning(self, text: str) -> None:
        self.log(text, LogCategory.WARNING)

    def error(self, text: str) -> None:
        self.log(text, LogCategory.ERROR)

    def level_of(self, message: LogMessage) -> LogLevel:
        return message.category.level

    def _is_visible(self, message: LogMessage) -> bool:
        return (message.category in self.enabled_categories
                and self.level_of(message).value >= self.log_level.value)

    def get_messages(self, count: Optional[int] = None,
                     categories: Optional[Iterable[LogCategory]] = None) -> list[LogMessage]:
        """Recent messages, oldest first.

        Args:
            count: Keep only the last ``count`` matches
            categories: Select these categories regardless of level; by
                default every enabled category at or above the log level
        """
        if categories:
            wanted = set(categories) & self.enabled_categories
            selected = [msg for msg in self.messages if msg.category in wanted]
        else:
            selected = [msg for msg in self.messages if self._is_visible(msg)]

        if count is not None:
            selected = selected[-count:] if count > 0 else []
        return selected

    def latest(self) -> Optional[LogMessage]:
        """Most recent visible message (what a status line would show)."""
        for msg in reversed(self.messages):
            if self._is_visible(msg):
                return msg
        return None

    def clear(self) -> None:
        self.messages.clear()

    def enable_category(self, category: LogCategory) -> None:
        self.enabled_categories.add(category)

    def disable_category(self, category: LogCategory) -> None:
        self.enabled_categories.discard(category)

    def set_log_level(self, level: LogLevel) -> None:
        self.log_level = level

    def is_debug_enabled(self) -> bool:
        return self.log_level == LogLevel.DEBUG and LogCategory.DEBUG in self.enabled_categories

    def toggle_debug(self) -> None:
        debug_on = not self.is_debug_enabled()
        if debug_on:
            self.enable_category(LogCategory.DEBUG)
        else:
            self.disable_category(LogCategory.DEBUG)
        self.set_log_level(LogLevel.DEBUG if debug_on else LogLevel.INFO)

    def save_log_to_file(self, filepath: str) -> bool:
        """Write the visible messages to ``filepath``.

        The same filters as :meth:`get_messages` apply, so DEBUG, INPUT and
        CONFIG lines are only written when the log level is DEBUG. A failure
        is logged as an ERROR message, not raised.

        Returns:
            True if the file was written
        """
        selected = self.get_messages()
        counts = Counter(msg.category.name for msg in selected)
        summary = ", ".join(f"{name.lower()}={n}" for name, n in sorted(counts.items()))
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                f.write("jute - Session Log\n")
                f.write(f"Saved: {datetime.now():%Y-%m-%d %H:%M:%S}\n")
                f.write(f"Level: {self.log_level.name}\n")
                f.write(f"Messages: {len(selected)}" + (f" ({summary})" if summary else "") + "\n")
                f.write("-" * 60 + "\n")
                if not selected:
                    f.write("No messages to save.\n")
                for msg in selected:
                    stamp = msg.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
                    f.write(f"[{stamp}] [{msg.category.name}] {msg.text}\n")
        except OSError as e:
            self.error(f"Failed to save log file: {e}")
            return False

        self.system(f"Session log saved to {filepath}")
        return True
