import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import TodoMirrorError
from .logging_config import setup_logging
from .routers import auth as auth_router
from .routers import todos as todos_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "auth", "description": "Log in and out against the upstream identity API."},
    {
        "name": "todos",
        "description": "CRUD and pagination over the caller's locally cached todos.",
    },
]

_settings = get_settings()
setup_logging(_settings.app_env, _settings.log_level)

log = structlog.get_logger()

app = FastAPI(
    title="Todo Mirror",
    description="Authenticated todo backend that mirrors upstream todos into a local per-user store.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TodoMirrorError)
async def todo_mirror_exception_handler(request: Request, exc: TodoMirrorError) -> JSONResponse:
    """
    Render domain errors as ``{"message": ...}`` with the error's status code.
    """
    if exc.status_code >= 500:
        log.error(
            "request_failed",
            path=request.url.path,
            error=type(exc).__name__,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.store_backend}


app.include_router(auth_router.router)
app.include_router(todos_router.router)
