# todo_api/routes/todos.py
"""CRUD endpoints for todos."""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from todo_api.database import session_factory
from todo_api.errors import TodoNotFoundError
from todo_api.filters import CompletionFilter, PriorityFilter, TitleContainsFilter, TodoFilter
from todo_api.models import Priority, TodoRead, TodoWrite
from todo_api.repository import SqlTodoRepository, TodoRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])


def get_repository() -> TodoRepository:
    """Provide the todo repository for FastAPI dependency injection."""
    return SqlTodoRepository(session_factory)


@router.get("")
async def list_todos(
    priority: Optional[str] = Query(default=None, description="Ordinal 0-4 or name"),
    is_complete: Optional[bool] = Query(default=None, alias="isComplete"),
    search: Optional[str] = Query(default=None, min_length=1, description="Title contains"),
    repository: TodoRepository = Depends(get_repository),
) -> list[TodoRead]:
    """List todos, optionally filtered by priority, completion, and title text."""
    filters: list[TodoFilter] = []
    if priority is not None:
        try:
            filters.append(PriorityFilter(Priority.parse(priority)))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    if is_complete is not None:
        filters.append(CompletionFilter(is_complete))
    if search is not None:
        filters.append(TitleContainsFilter(search))
    return [TodoRead.from_todo(todo) async for todo in repository.list(*filters)]


@router.get("/{todo_id}")
async def get_todo(
    todo_id: uuid.UUID, repository: TodoRepository = Depends(get_repository)
) -> TodoRead:
    """Get a single todo by ID."""
    todo = await repository.get(todo_id)
    if todo is None:
        raise HTTPException(status_code=404, detail="Todo not found")
    return TodoRead.from_todo(todo)


@router.post("", status_code=201)
async def create_todo(
    body: TodoWrite,
    response: Response,
    repository: TodoRepository = Depends(get_repository),
) -> TodoRead:
    """Create a new todo. The server assigns the id."""
    if body.has_id():
        raise HTTPException(status_code=400, detail="id must not be set when creating a todo")
    todo = await repository.create(body.to_todo())
    response.headers["Location"] = f"/todos/{todo.id}"
    return TodoRead.from_todo(todo)


@router.put("/{todo_id}")
async def update_todo(
    todo_id: uuid.UUID,
    body: TodoWrite,
    repository: TodoRepository = Depends(get_repository),
) -> TodoRead:
    """Replace every mutable field of an existing todo."""
    if body.has_id() and body.id != todo_id:
        raise HTTPException(status_code=400, detail="id in body does not match id in path")
    todo = body.to_todo(todo_id)
    try:
        await repository.update(todo)
    except TodoNotFoundError as exc:
        logger.debug("Update of missing todo %s", todo_id)
        raise HTTPException(status_code=404, detail="Todo not found") from exc
    return TodoRead.from_todo(todo)


@router.delete("/{todo_id}")
async def delete_todo(
    todo_id: uuid.UUID, repository: TodoRepository = Depends(get_repository)
) -> Response:
    """Delete a todo by ID."""
    try:
        await repository.delete(todo_id)
    except TodoNotFoundError as exc:
        logger.debug("Delete of missing todo %s", todo_id)
        raise HTTPException(status_code=404, detail="Todo not found") from exc
    return Response(status_code=200)
