"""
Unit tests for Entry and Collection.

Tests ordering, key uniqueness and the last-write-wins rule.
"""
import pytest

from jute.core.collection import Collection, Entry
from jute.core.errors import ValidationError


class TestEntry:
    """Test the Entry dataclass."""

    def test_initialization(self):
        entry = Entry("name", "jute")
        assert entry.key == "name"
        assert entry.value == "jute"

    def test_frozen_dataclass(self):
        entry = Entry("name", "jute")
        with pytest.raises(AttributeError):
            entry.value = "other"  # type: ignore[misc]


class TestCollectionUpsert:
    """Test adding and replacing entries."""

    def test_starts_empty(self):
        collection = Collection()
        assert len(collection) == 0
        assert collection.is_empty()

    def test_append_keeps_insertion_order(self):
        collection = Collection()
        collection.upsert("b", "2")
        collection.upsert("a", "1")
        collection.upsert("c", "3")

        assert collection.keys() == ["b", "a", "c"]

    def test_upsert_reports_replacement(self):
        collection = Collection()
        assert collection.upsert("k", "v1") is False
        assert collection.upsert("k", "v2") is True

    def test_duplicate_key_replaces_in_place(self):
        """Last write wins and the entry keeps its original position."""
        collection = Collection()
        collection.upsert("first", "1")
        collection.upsert("second", "2")
        collection.upsert("first", "updated")

        assert len(collection) == 2
        assert collection.entries == [Entry("first", "updated"), Entry("second", "2")]

    def test_empty_key_rejected(self):
        collection = Collection()
        with pytest.raises(ValidationError):
            collection.upsert("", "value")
        assert collection.is_empty()

    def test_empty_value_allowed(self):
        collection = Collection()
        collection.upsert("flag", "")
        assert collection.to_dict() == {"flag": ""}


class TestCollectionRemoveAndRename:
    """Test removal and in-place renaming."""

    def test_remove_returns_entry(self):
        collection = Collection([Entry("a", "1"), Entry("b", "2")])
        removed = collection.remove("a")

        assert removed == Entry("a", "1")
        assert collection.keys() == ["b"]

    def test_remove_missing_key(self):
        with pytest.raises(KeyError):
            Collection().remove("missing")

    def test_rename_keeps_position(self):
        collection = Collection([Entry("a", "1"), Entry("b", "2"), Entry("c", "3")])
        collection.rename("b", "beta", "two")

        assert collection.entries == [Entry("a", "1"), Entry("beta", "two"), Entry("c", "3")]

    def test_rename_onto_existing_key_drops_the_other(self):
        collection = Collection([Entry("a", "1"), Entry("b", "2")])
        collection.rename("b", "a", "new")

        assert collection.entries == [Entry("a", "new")]

    def test_rename_missing_key_appends(self):
        collection = Collection([Entry("a", "1")])
        collection.rename("gone", "b", "2")

        assert collection.keys() == ["a", "b"]

    def test_rename_to_empty_key_rejected(self):
        collection = Collection([Entry("a", "1")])
        with pytest.raises(ValidationError):
            collection.rename("a", "", "1")
        assert collection.keys() == ["a"]


class TestCollectionAccess:
    """Test lookups, copies and equality."""

    def test_constructor_applies_last_write_wins(self):
        collection = Collection([Entry("k", "1"), Entry("k", "2")])
        assert collection.entries == [Entry("k", "2")]

    def test_index_and_entry_at(self):
        collection = Collection([Entry("a", "1"), Entry("b", "2")])

        assert collection.index_of("b") == 1
        assert collection.index_of("missing") is None
        assert collection.entry_at(0) == Entry("a", "1")

    def test_contains(self):
        collection = Collection([Entry("a", "1")])

        assert "a" in collection
        assert "b" not in collection

    def test_copy_is_independent(self):
        original = Collection([Entry("a", "1")])
        copied = original.copy()
        copied.upsert("b", "2")

        assert original.keys() == ["a"]
        assert copied.keys() == ["a", "b"]

    def test_equality_is_order_sensitive(self):
        assert Collection([Entry("a", "1")]) == Collection([Entry("a", "1")])
        assert (Collection([Entry("a", "1"), Entry("b", "2")])
                != Collection([Entry("b", "2"), Entry("a", "1")]))

    def test_to_dict(self):
        collection = Collection([Entry("a", "1"), Entry("b", "2")])
        assert collection.to_dict() == {"a": "1", "b": "2"}
