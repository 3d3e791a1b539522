# todo_api/models.py
"""Todo table model, priority enum, and the JSON schemas served by the API."""

import uuid
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField, StrictBool, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import CheckConstraint, Integer
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

TITLE_MAX_LENGTH = 128
NIL_ID = uuid.UUID(int=0)


class Priority(IntEnum):
    lowest = 0
    low = 1
    normal = 2
    high = 3
    highest = 4

    @classmethod
    def parse(cls, value: str) -> "Priority":
        """Resolve a priority from its ordinal ("3") or its name ("High")."""
        text = value.strip()
        if text.lstrip("-").isdigit():
            try:
                return cls(int(text))
            except ValueError:
                raise ValueError(f"Priority must be between 0 and 4, got {text}") from None
        try:
            return cls[text.lower()]
        except KeyError:
            raise ValueError(f"Unknown priority: {value!r}") from None


class PriorityType(TypeDecorator):
    """Stores a Priority as its ordinal integer."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(Priority(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Priority(value)


class Todo(SQLModel, table=True):
    """Todo database table."""
    __tablename__ = "todos"
    __table_args__ = (
        CheckConstraint("priority BETWEEN 0 AND 4", name="ck_todos_priority"),
    )

    id: Optional[uuid.UUID] = Field(default=None, primary_key=True)
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None)
    is_complete: bool = Field(default=False)
    priority: Priority = Field(default=Priority.normal, sa_type=PriorityType, index=True)


class TodoSchema(BaseModel):
    """Fields shared by request and response bodies, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = PydanticField(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    is_complete: StrictBool
    priority: Priority

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title must not be blank")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v):
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("Priority must be an integer between 0 and 4")
        return v


class TodoWrite(TodoSchema):
    """Body of POST and PUT. The id is optional and checked by the route."""
    id: Optional[uuid.UUID] = None

    def has_id(self) -> bool:
        return self.id is not None and self.id != NIL_ID

    def to_todo(self, todo_id: Optional[uuid.UUID] = None) -> Todo:
        return Todo(
            id=todo_id,
            title=self.title,
            description=self.description,
            is_complete=self.is_complete,
            priority=self.priority,
        )


class TodoRead(TodoSchema):
    """Todo as returned by the API."""
    id: uuid.UUID

    @classmethod
    def from_todo(cls, todo: Todo) -> "TodoRead":
        return cls(
            id=todo.id,
            title=todo.title,
            description=todo.description,
            is_complete=todo.is_complete,
            priority=todo.priority,
        )
