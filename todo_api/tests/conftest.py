"""Shared fixtures: a fresh SQLite database per test and an HTTP client wired to it."""

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from todo_api.database import create_db_and_tables
from todo_api.main import app
from todo_api.repository import InMemoryTodoRepository, SqlTodoRepository
from todo_api.routes.todos import get_repository


@pytest_asyncio.fixture(name="engine")
async def engine_fixture(tmp_path):
    """Create a file-backed SQLite database with the todos table for each test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'todos.db'}")
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(name="sql_repository")
async def sql_repository_fixture(engine):
    return SqlTodoRepository(async_sessionmaker(engine, expire_on_commit=False))


@pytest_asyncio.fixture(name="repository", params=["sql", "memory"])
async def repository_fixture(request, engine):
    """Run repository tests against both implementations."""
    if request.param == "memory":
        return InMemoryTodoRepository()
    return SqlTodoRepository(async_sessionmaker(engine, expire_on_commit=False))


@pytest_asyncio.fixture(name="client")
async def client_fixture(sql_repository):
    """Create an HTTP client for the app with the repository overridden."""
    app.dependency_overrides[get_repository] = lambda: sql_repository
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
