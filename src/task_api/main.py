import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import DuplicateTitleError, TaskStoreError, TaskValidationError
from .logging_setup import setup_logging
from .repositories import get_repository
from .routers import tasks as tasks_router
from .schemas import FieldError
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, read, update and delete task records.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Only close a store that was actually opened.
    if get_repository.cache_info().currsize:
        get_repository().close()
        get_repository.cache_clear()
        logger.info("Task store closed")


app = FastAPI(
    title="Task API",
    description="CRUD service for task records stored in MongoDB.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

_settings = get_settings()

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _errors_response(errors) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"errors": errors}),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report malformed bodies (invalid JSON, non-object bodies) with the same
    400 envelope as field rule violations.
    """
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        location = "params" if loc and loc[0] == "path" else (loc[0] if loc else "body")
        errors.append(
            FieldError(
                value=err.get("input"),
                msg=err.get("msg", "Invalid value"),
                path=".".join(loc[1:]),
                location=location,
            )
        )
    return _errors_response(errors)


@app.exception_handler(TaskValidationError)
async def task_validation_exception_handler(request: Request, exc: TaskValidationError) -> JSONResponse:
    """
    Response format:
        {"errors": [{"type": "field", "value": ..., "msg": ..., "path": ..., "location": ...}]}
    """
    return _errors_response(exc.errors)


@app.exception_handler(DuplicateTitleError)
async def duplicate_title_exception_handler(request: Request, exc: DuplicateTitleError) -> JSONResponse:
    return _errors_response(
        [FieldError(value=exc.title, msg="title already exists", path="title", location="body")]
    )


@app.exception_handler(TaskStoreError)
async def store_exception_handler(request: Request, exc: TaskStoreError) -> JSONResponse:
    logger.error("Task store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


app.include_router(tasks_router.router)


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Server running on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
