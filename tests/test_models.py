"""Unit tests for note records and checklist edit text."""

import uuid

import pytest

from sticky_checklist.models import NoteItem, NoteRecord, items_from_text, items_to_text


class TestNoteRecordDefaults:
    """Tests for a freshly constructed note."""

    def test_defaults(self):
        """Test a new note gets the documented defaults."""
        note = NoteRecord()

        assert note.title == "Note"
        assert (note.x, note.y, note.width, note.height) == (200, 200, 250, 200)
        assert note.visible is True
        assert note.collapsed is False
        assert note.items == []

    def test_ids_are_unique_uuids(self):
        """Test every note gets its own canonical UUID string."""
        first, second = NoteRecord(), NoteRecord()

        assert first.id != second.id
        assert str(uuid.UUID(first.id)) == first.id

    def test_restore_height_uses_expanded_height(self):
        note = NoteRecord(expanded_height=340)
        assert note.restore_height() == 340

    def test_restore_height_falls_back_when_too_small(self):
        """Test a remembered height not above the collapsed height is replaced."""
        note = NoteRecord(expanded_height=30)
        assert note.restore_height() == 200


class TestNoteRecordSerialization:
    """Tests for to_dict / from_dict."""

    def test_to_dict_uses_stable_field_names(self):
        note = NoteRecord(items=[NoteItem("milk", True)])

        data = note.to_dict()

        assert set(data) == {
            "id", "items", "title", "collapsed", "expandedHeight",
            "x", "y", "width", "height", "visible",
        }
        assert data["items"] == [{"text": "milk", "checked": True}]

    def test_round_trip_preserves_everything(self):
        note = NoteRecord(
            items=[NoteItem("b", False), NoteItem("a", True)],
            title="Groceries",
            collapsed=True,
            expanded_height=310.5,
            x=-40.25,
            y=12,
            width=300,
            height=180,
            visible=False,
        )

        assert NoteRecord.from_dict(note.to_dict()) == note

    def test_missing_fields_default(self):
        """Test an entry with only an id loads with defaults."""
        note_id = str(uuid.uuid4())

        note = NoteRecord.from_dict({"id": note_id})

        assert note.id == note_id
        assert note.title == "Note"
        assert note.width == 250
        assert note.visible is True

    def test_missing_id_gets_fresh_one(self):
        note = NoteRecord.from_dict({"title": "x"})
        assert uuid.UUID(note.id)

    def test_id_is_canonicalized(self):
        raw = "6F9619FF-8B86-D011-B42D-00C04FC964FF"
        note = NoteRecord.from_dict({"id": raw})
        assert note.id == raw.lower()

    def test_unknown_fields_are_ignored(self):
        note = NoteRecord.from_dict({"title": "t", "color": "#FFFF99"})
        assert note.title == "t"

    @pytest.mark.parametrize("data", [
        {"id": "not-a-uuid"},
        {"id": 12},
        {"title": 5},
        {"x": "100"},
        {"width": True},
        {"visible": "yes"},
        {"items": "milk"},
        {"items": ["milk"]},
        {"items": [{"text": 1}]},
        {"x": float("nan")},
        {"width": float("inf")},
        {"expandedHeight": float("-inf")},
        {"y": 10 ** 400},
    ])
    def test_wrong_types_are_rejected(self, data):
        with pytest.raises(ValueError):
            NoteRecord.from_dict(data)

    def test_non_object_is_rejected(self):
        with pytest.raises(ValueError):
            NoteRecord.from_dict(["not", "a", "note"])


class TestEditText:
    """Tests for the [x] / [ ] checklist edit format."""

    def test_items_to_text(self):
        items = [NoteItem("done", True), NoteItem("todo", False)]
        assert items_to_text(items) == "[x] done\n[ ] todo"

    def test_items_from_text(self):
        items = items_from_text("[x] done\n[ ] todo\n[X] shouting")

        assert items == [
            NoteItem("done", True),
            NoteItem("todo", False),
            NoteItem("shouting", True),
        ]

    def test_plain_lines_become_unchecked_items(self):
        assert items_from_text("buy bread") == [NoteItem("buy bread", False)]

    def test_blank_lines_are_dropped(self):
        items = items_from_text("[ ] a\n\n   \n[ ] b\r\n")
        assert [item.text for item in items] == ["a", "b"]
