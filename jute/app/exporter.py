"""
Serialization of a finished collection to JSON and delivery to a sink.

Value coercion rule (applied only when ``typed`` is enabled):

- exactly ``true`` / ``false`` becomes a boolean
- exactly ``null`` becomes null
- text that fully matches the JSON number grammar becomes an int when it has
  no fraction or exponent, otherwise a float; results that are not finite
  stay strings
- anything else stays a string, untrimmed
"""

import json
import math
import os
import re
import stat
import sys
import tempfile
from typing import TYPE_CHECKING, Any, BinaryIO, Optional, Union

from ..core.collection import Collection
from ..core.errors import ExportError

if TYPE_CHECKING:
    from .log_manager import LogManager


STDOUT_SINK = "-"

JSON_NUMBER = re.compile(r"-?(?:0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")

JSON_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None}

JsonValue = Union[str, int, float, bool, None]


def coerce_value(text: str, typed: bool = False) -> JsonValue:
    """Apply the coercion rule to one value."""
    if not typed:
        return text

    if text in JSON_LITERALS:
        return JSON_LITERALS[text]

    match = JSON_NUMBER.fullmatch(text)
    if match is None:
        return text

    fraction, exponent = match.groups()
    if fraction is None and exponent is None:
        return int(text)

    number = float(text)
    return number if math.isfinite(number) else text


def to_document(collection: Collection, typed: bool = False) -> dict[str, JsonValue]:
    return {entry.key: coerce_value(entry.value, typed) for entry in collection}


def serialize(collection: Collection, typed: bool = False,
              indent: Optional[int] = None) -> bytes:
    """Serialize a collection to a UTF-8, newline-terminated JSON object.

    Members keep collection order. Output is compact unless ``indent`` is set.
    """
    separators = (",", ":") if indent is None else (",", ": ")
    text = json.dumps(
        to_document(collection, typed),
        ensure_ascii=False,
        indent=indent,
        separators=separators,
    )
    return (text + "\n").encode("utf-8")


def is_stdout(sink: Optional[str]) -> bool:
    return sink is None or sink == STDOUT_SINK


def write(data: bytes, sink: Optional[str] = None,
          stdout: Optional[BinaryIO] = None) -> None:
    """Write serialized bytes to standard output or a file path.

    File writes are atomic: the bytes go to a temporary file next to the
    target which then replaces it, so a failure never leaves a partial file.
    An existing target keeps its permission bits and must itself be writable.

    Raises:
        ExportError: stdout or the path is not writable (closed pipe, full
            disk, permissions, missing parent directory, read-only target,
            target is a directory)
    """
    if is_stdout(sink):
        stream = stdout or sys.stdout.buffer
        try:
            stream.write(data)
            stream.flush()
        except OSError as e:
            raise ExportError("stdout", e.strerror or str(e)) from e
        return

    assert sink is not None
    target_dir = os.path.dirname(os.path.abspath(sink))
    if os.path.isdir(sink):
        raise ExportError(sink, "is a directory")

    if os.path.exists(sink):
        if not os.access(sink, os.W_OK):
            raise ExportError(sink, "Permission denied")
        mode = stat.S_IMODE(os.stat(sink).st_mode)
    else:
        mode = 0o666 & ~_current_umask()

    try:
        fd, tmp = tempfile.mkstemp(prefix=".jute_", suffix=".json.tmp", dir=target_dir)
    except OSError as e:
        raise ExportError(sink, e.strerror or str(e)) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        # mkstemp creates 0600
        os.chmod(tmp, mode)
        os.replace(tmp, sink)
    except OSError as e:
        raise ExportError(sink, e.strerror or str(e)) from e
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class Exporter:
    """Serializes a collection and writes it to one sink, once."""

    def __init__(self, sink: Optional[str] = None, typed: bool = False,
                 indent: Optional[int] = None,
                 log_manager: Optional["LogManager"] = None,
                 stdout: Optional[BinaryIO] = None):
        self.sink = sink
        self.typed = typed
        self.indent = indent
        self.log_manager = log_manager
        self._stdout = stdout

    @property
    def sink_name(self) -> str:
        return "stdout" if is_stdout(self.sink) else str(self.sink)

    def serialize(self, collection: Collection) -> bytes:
        return serialize(collection, typed=self.typed, indent=self.indent)

    def export(self, collection: Collection) -> int:
        """Serialize and write the collection.

        Returns:
            Number of bytes written

        Raises:
            ExportError: the sink could not be written
        """
        data = self.serialize(collection)
        try:
            write(data, self.sink, stdout=self._stdout)
        except ExportError as e:
            if self.log_manager:
                self.log_manager.error(str(e))
            raise

        if self.log_manager:
            self.log_manager.export(
                f"Wrote {len(collection)} pairs ({len(data)} bytes) to {self.sink_name}"
            )
        return len(data)
