"""Entry and Collection: the data the user builds up during a session."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .errors import ValidationError


@dataclass(frozen=True)
class Entry:
    """A single key-value pair collected from the user."""
    key: str
    value: str


class Collection:
    """Ordered set of entries with unique keys.

    Insertion order is kept for display and export. Writing an existing key
    replaces its value in place (last write wins), so the entry keeps its
    original position.
    """

    def __init__(self, entries: Optional[Iterable[Entry]] = None):
        self._entries: dict[str, Entry] = {}
        for entry in entries or ():
            self.upsert(entry.key, entry.value)

    def upsert(self, key: str, value: str) -> bool:
        """Add or replace an entry.

        Returns:
            True if an existing entry was replaced, False if one was appended
        """
        if not key:
            raise ValidationError()
        replaced = key in self._entries
        self._entries[key] = Entry(key, value)
        return replaced

    def rename(self, old_key: str, new_key: str, value: str) -> None:
        """Replace ``old_key`` with ``new_key`` at the same position.

        Any other entry already using ``new_key`` is dropped, since the
        renamed entry is the latest write for that key.
        """
        if not new_key:
            raise ValidationError()
        if old_key not in self._entries:
            self.upsert(new_key, value)
            return
        rebuilt: dict[str, Entry] = {}
        for key, entry in self._entries.items():
            if key == old_key:
                rebuilt[new_key] = Entry(new_key, value)
            elif key != new_key:
                rebuilt[key] = entry
        self._entries = rebuilt

    def remove(self, key: str) -> Entry:
        if key not in self._entries:
            raise KeyError(key)
        return self._entries.pop(key)

    def entry_at(self, index: int) -> Entry:
        return self.entries[index]

    def index_of(self, key: str) -> Optional[int]:
        for index, existing in enumerate(self._entries):
            if existing == key:
                return index
        return None

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries.values())

    def keys(self) -> list[str]:
        return list(self._entries)

    def to_dict(self) -> dict[str, str]:
        return {entry.key: entry.value for entry in self._entries.values()}

    def copy(self) -> "Collection":
        return Collection(self._entries.values())

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"Collection({self.entries!r})"
