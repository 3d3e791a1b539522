# todo_api/main.py
"""FastAPI application for the todo list backend."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from todo_api.database import create_db_and_tables, engine, ping
from todo_api.routes.todos import router as todos_router

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup and release the pool on shutdown."""
    await create_db_and_tables()
    yield
    await engine.dispose()


app = FastAPI(title="Todo API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
    expose_headers=["Location"],
)

app.include_router(todos_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed input as 400 instead of FastAPI's default 422.

    A path id that is not a UUID matches no todo, so it is a 404.
    """
    errors = exc.errors()
    if any(error["loc"][0] == "path" for error in errors):
        return JSONResponse(status_code=404, content={"detail": "Not Found"})
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(errors)})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse("/docs")


@app.get("/health")
async def health_check():
    """Health check endpoint. Reports unhealthy when the database is unreachable."""
    try:
        await ping()
    except (SQLAlchemyError, OSError):
        logger.exception("Database health check failed")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "service": "todo-api"},
        )
    return {"status": "healthy", "service": "todo-api"}
