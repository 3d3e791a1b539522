# todo_api/repository.py
"""Todo repository: the only code that reads or writes stored todos.

``TodoRepository`` is the interface the routes depend on.
``SqlTodoRepository`` persists through SQLModel/SQLAlchemy with one session
per operation; ``InMemoryTodoRepository`` keeps todos in a dict and is the
drop-in substitute used by tests.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import col, select

from todo_api.errors import TodoNotFoundError
from todo_api.filters import TodoFilter, matches_all
from todo_api.models import Todo

logger = logging.getLogger(__name__)


def _copy(todo: Todo) -> Todo:
    return Todo(
        id=todo.id,
        title=todo.title,
        description=todo.description,
        is_complete=todo.is_complete,
        priority=todo.priority,
    )


class TodoRepository(ABC):

    @abstractmethod
    async def create(self, todo: Todo) -> Todo:
        """Persist *todo* under a freshly generated id and return the stored value.

        Any id already set on *todo* is ignored.
        """

    @abstractmethod
    def list(self, *filters: TodoFilter) -> AsyncIterator[Todo]:
        """Yield every stored todo that passes all *filters*.

        No ordering is guaranteed. Each call starts a new pass over storage.
        """

    @abstractmethod
    async def get(self, todo_id: uuid.UUID) -> Optional[Todo]:
        """Return the todo with *todo_id*, or None."""

    @abstractmethod
    async def update(self, todo: Todo) -> None:
        """Overwrite title, description, is_complete and priority of the stored todo.

        Raises
        ------
        TodoNotFoundError
            If no todo with ``todo.id`` exists.
        """

    @abstractmethod
    async def delete(self, todo_id: uuid.UUID) -> None:
        """Remove the todo with *todo_id*.

        Raises
        ------
        TodoNotFoundError
            If no todo with *todo_id* exists.
        """


class SqlTodoRepository(TodoRepository):
    """Repository backed by the ``todos`` table.

    Update and delete are single set-based statements; a zero row count
    means the id did not exist.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, todo: Todo) -> Todo:
        record = _copy(todo)
        record.id = uuid.uuid4()
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
        logger.info("Created todo %s", record.id)
        return record

    async def list(self, *filters: TodoFilter) -> AsyncIterator[Todo]:
        statement = select(Todo)
        for todo_filter in filters:
            statement = statement.where(todo_filter.clause())
        logger.debug("Listing todos with filters %s", filters)
        async with self._session_factory() as session:
            result = await session.stream_scalars(statement)
            async for todo in result:
                yield todo

    async def get(self, todo_id: uuid.UUID) -> Optional[Todo]:
        async with self._session_factory() as session:
            return await session.get(Todo, todo_id)

    async def update(self, todo: Todo) -> None:
        statement = (
            update(Todo)
            .where(col(Todo.id) == todo.id)
            .values(
                title=todo.title,
                description=todo.description,
                is_complete=todo.is_complete,
                priority=todo.priority,
            )
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()
        if result.rowcount == 0:
            raise TodoNotFoundError(todo.id)

    async def delete(self, todo_id: uuid.UUID) -> None:
        statement = delete(Todo).where(col(Todo.id) == todo_id)
        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()
        if result.rowcount == 0:
            raise TodoNotFoundError(todo_id)
        logger.info("Deleted todo %s", todo_id)


class InMemoryTodoRepository(TodoRepository):
    """Dict-backed repository. Stores and hands out copies, never shared instances."""

    def __init__(self) -> None:
        self._todos: dict[uuid.UUID, Todo] = {}

    async def create(self, todo: Todo) -> Todo:
        record = _copy(todo)
        record.id = uuid.uuid4()
        self._todos[record.id] = record
        return _copy(record)

    async def list(self, *filters: TodoFilter) -> AsyncIterator[Todo]:
        for todo in list(self._todos.values()):
            if matches_all(todo, filters):
                yield _copy(todo)

    async def get(self, todo_id: uuid.UUID) -> Optional[Todo]:
        todo = self._todos.get(todo_id)
        return _copy(todo) if todo is not None else None

    async def update(self, todo: Todo) -> None:
        if todo.id not in self._todos:
            raise TodoNotFoundError(todo.id)
        self._todos[todo.id] = _copy(todo)

    async def delete(self, todo_id: uuid.UUID) -> None:
        if self._todos.pop(todo_id, None) is None:
            raise TodoNotFoundError(todo_id)
