import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from api import state
from api.metrics import MODEL_ERRORS_TOTAL, REQUESTS_TOTAL
from api.routers import ai, ops, tasks
from storage import db
from storage.task_repository import PostgresTaskRepository
from todo_ai.errors import (
    InputValidationError,
    ModelAuthError,
    ModelError,
    ModelSchemaViolation,
    TodoAIError,
)

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if state.settings.use_database:
        await db.init_db_pool()
        await db.init_schema()
        state.task_repository = PostgresTaskRepository()
        logger.info("Using PostgreSQL task store")
    else:
        logger.info("USE_DATABASE is off, using in-memory task store")

    yield

    if state.settings.use_database:
        await db.close_db_pool()


app = FastAPI(title="TODO AI", lifespan=lifespan)
app.include_router(ai.router)
app.include_router(tasks.router)
app.include_router(ops.router)


@app.exception_handler(TodoAIError)
async def handle_todo_ai_error(request: Request, exc: TodoAIError) -> JSONResponse:
    if isinstance(exc, (ModelSchemaViolation, ModelAuthError)):
        # full detail stays in the log
        logger.error(f"{exc.code} on {request.url.path}: {exc.detail}", exc_info=exc)
    elif isinstance(exc, InputValidationError):
        logger.info(f"Rejected input on {request.url.path}: {exc.code}")
    else:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.detail}")

    if isinstance(exc, ModelError):
        MODEL_ERRORS_TOTAL.labels(code=exc.code).inc()
    REQUESTS_TOTAL.labels(endpoint=request.url.path, status=exc.code).inc()

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.user_message, "code": exc.code, "retryable": exc.retryable},
    )


def run() -> None:
    """Console entry point (``todo-ai``); HOST and PORT pick the bind address."""
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
