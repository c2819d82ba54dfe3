from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}

TITLE_MAX_LENGTH = 200


def _coerce_completed(value: Any) -> Any:
    """
    Convert truthy/falsy input into a bool before the boolean check runs.
    - bool: returned as-is
    - int/float: truthiness
    - str: true/false/1/0/yes/no/on/off (case-insensitive)
    Anything else is returned unchanged so the strict bool check rejects it.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
    return value


def _ensure_utf8(value: str) -> str:
    """Reject text that cannot be stored or returned as UTF-8 (e.g. lone surrogates)."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError("text must be valid UTF-8; lone surrogate characters are not allowed") from e
    return value


def _clean_title(value: str) -> str:
    s = _ensure_utf8(value).strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
            }
        },
    )

    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: StrictBool = Field(default=False, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _ensure_utf8(v)

    @field_validator("completed", mode="before")
    @classmethod
    def coerce_completed(cls, v: Any) -> Any:
        return _coerce_completed(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "completed": True,
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: Optional[StrictBool] = Field(default=None, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        """
        If title is provided it must be a non-empty string; null is rejected.
        """
        if v is None:
            raise ValueError("title cannot be null")
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _ensure_utf8(v)

    @field_validator("completed", mode="before")
    @classmethod
    def coerce_completed(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("completed cannot be null")
        return _coerce_completed(v)

    def changes(self) -> Dict[str, Any]:
        """Return only the fields present in the request body."""
        return self.model_dump(exclude_unset=True)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "todo_id": "0b6f7c1e-3f0e-4a53-9a43-7d3c2f3c9a10",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
            }
        },
    )

    todo_id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")


@dataclass(frozen=True)
class FieldError:
    """A single rejected field in a request body."""

    field: str
    message: str
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "type": self.type}


ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ValidationOutcome(Generic[ModelT]):
    """Either a validated model or the list of field errors that rejected it."""

    value: Optional[ModelT] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


# PUBLIC_INTERFACE
def validate_payload(schema: Type[ModelT], data: Any) -> ValidationOutcome[ModelT]:
    """
    Validate a decoded JSON body against a schema.

    Returns a ValidationOutcome holding the model on success, or one
    FieldError per rejected field. A body that is not a JSON object is
    reported against the pseudo-field 'body'.
    """
    if not isinstance(data, dict):
        return ValidationOutcome(
            errors=[FieldError(field="body", message="Request body must be a JSON object", type="dict_type")]
        )
    try:
        return ValidationOutcome(value=schema.model_validate(data))
    except ValidationError as exc:
        errors = [
            FieldError(
                field=".".join(str(loc) for loc in err["loc"]) or "body",
                message=err["msg"],
                type=err["type"],
            )
            for err in exc.errors()
        ]
        return ValidationOutcome(errors=errors)
