import pytest

from todo_api.schemas import TodoCreate, TodoUpdate, validate_payload


class TestValidatePayload:
    def test_valid_create(self):
        outcome = validate_payload(TodoCreate, {"title": "Buy milk"})
        assert outcome.ok
        assert outcome.value.title == "Buy milk"
        assert outcome.value.description is None
        assert outcome.value.completed is False

    def test_unknown_fields_are_ignored(self):
        outcome = validate_payload(TodoCreate, {"title": "Buy milk", "todo_id": "mine"})
        assert outcome.ok
        assert "todo_id" not in outcome.value.model_dump()

    def test_missing_title(self):
        outcome = validate_payload(TodoCreate, {})
        assert not outcome.ok
        assert outcome.value is None
        assert outcome.errors[0].field == "title"
        assert outcome.errors[0].type == "missing"

    def test_title_too_long(self):
        outcome = validate_payload(TodoCreate, {"title": "x" * 201})
        assert [e.field for e in outcome.errors] == ["title"]

    def test_non_object_body(self):
        outcome = validate_payload(TodoCreate, None)
        assert [e.to_dict() for e in outcome.errors] == [
            {"field": "body", "message": "Request body must be a JSON object", "type": "dict_type"}
        ]


class TestCompletedCoercion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (True, True),
            (False, False),
            (1, True),
            (0, False),
            (2.5, True),
            ("true", True),
            (" YES ", True),
            ("off", False),
            ("0", False),
        ],
    )
    def test_convertible_values(self, raw, expected):
        outcome = validate_payload(TodoCreate, {"title": "t", "completed": raw})
        assert outcome.ok
        assert outcome.value.completed is expected

    @pytest.mark.parametrize("raw", ["maybe", [], {"a": 1}])
    def test_unconvertible_values(self, raw):
        outcome = validate_payload(TodoCreate, {"title": "t", "completed": raw})
        assert [e.field for e in outcome.errors] == ["completed"]


class TestTodoUpdate:
    def test_changes_only_contains_sent_fields(self):
        outcome = validate_payload(TodoUpdate, {"completed": True})
        assert outcome.value.changes() == {"completed": True}

    def test_explicit_null_description_is_a_change(self):
        outcome = validate_payload(TodoUpdate, {"description": None})
        assert outcome.value.changes() == {"description": None}

    @pytest.mark.parametrize("field", ["title", "completed"])
    def test_null_required_columns_rejected(self, field):
        outcome = validate_payload(TodoUpdate, {field: None})
        assert [e.field for e in outcome.errors] == [field]


class TestUnencodableText:
    def test_title_with_lone_surrogate_rejected(self):
        outcome = validate_payload(TodoCreate, {"title": "a\ud800b"})
        assert [e.field for e in outcome.errors] == ["title"]

    def test_description_with_lone_surrogate_rejected(self):
        outcome = validate_payload(TodoCreate, {"title": "ok", "description": "x\udfffy"})
        assert [e.field for e in outcome.errors] == ["description"]

    @pytest.mark.parametrize("field", ["title", "description"])
    def test_update_rejects_lone_surrogate(self, field):
        outcome = validate_payload(TodoUpdate, {field: "\ud83d"})
        assert [e.field for e in outcome.errors] == [field]

    def test_non_ascii_text_accepted(self):
        outcome = validate_payload(TodoCreate, {"title": "Café ☕", "description": "\U0001f95b"})
        assert outcome.ok
        assert outcome.value.title == "Café ☕"
