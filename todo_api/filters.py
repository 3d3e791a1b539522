# todo_api/filters.py
"""Composable filters over todos.

Each filter is both a predicate over a ``Todo`` and the equivalent SQL
clause, so the same filter value works against the database and against
in-memory collections. Lists apply filters as a logical AND.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import col

from todo_api.models import Priority, Todo


class TodoFilter(ABC):
    """Base class for todo filters.

    Subclasses implement :meth:`matches` and :meth:`clause` with the same
    meaning; repositories never branch on the filter kind.
    """

    @abstractmethod
    def matches(self, todo: Todo) -> bool:
        """Return True when *todo* passes this filter. Must be side-effect free."""

    @abstractmethod
    def clause(self) -> ColumnElement[bool]:
        """Return the SQL WHERE clause equivalent to :meth:`matches`."""

    def __call__(self, todo: Todo) -> bool:
        return self.matches(todo)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


class PriorityFilter(TodoFilter):
    def __init__(self, priority: Priority) -> None:
        self.priority = Priority(priority)

    def matches(self, todo: Todo) -> bool:
        return todo.priority == self.priority

    def clause(self) -> ColumnElement[bool]:
        return col(Todo.priority) == self.priority


class CompletionFilter(TodoFilter):
    def __init__(self, is_complete: bool) -> None:
        self.is_complete = is_complete

    def matches(self, todo: Todo) -> bool:
        return bool(todo.is_complete) == self.is_complete

    def clause(self) -> ColumnElement[bool]:
        return col(Todo.is_complete) == self.is_complete


class TitleContainsFilter(TodoFilter):
    """Case-insensitive substring match on the title."""

    def __init__(self, text: str) -> None:
        self.text = text

    def matches(self, todo: Todo) -> bool:
        return self.text.lower() in todo.title.lower()

    def clause(self) -> ColumnElement[bool]:
        return col(Todo.title).icontains(self.text, autoescape=True)


def matches_all(todo: Todo, filters: Iterable[TodoFilter]) -> bool:
    """AND-fold of *filters* over *todo*. True when there are no filters."""
    return all(todo_filter(todo) for todo_filter in filters)
