from contextlib import asynccontextmanager
from typing import Any, Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from evalo.api.v1.api import api_router
from evalo.core.config import get_settings
from evalo.core.exceptions import (
    AuthenticationError, AuthorizationError, BaseApplicationError,
    ClassificationUnavailableError, CodeGenerationError, CounterUpdateError,
    EventStateError, InvalidCodeError, NotFoundError, ValidationError
)
from evalo.core.logging import get_logger, setup_logging

settings = get_settings()
logger = get_logger(__name__)

ERROR_STATUS_CODES: Dict[Type[BaseApplicationError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidCodeError: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ClassificationUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    CounterUpdateError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    EventStateError: status.HTTP_409_CONFLICT,
    CodeGenerationError: status.HTTP_503_SERVICE_UNAVAILABLE,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events using the recommended
    lifespan context manager approach in FastAPI
    """
    setup_logging()
    logger.info("Starting application")

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Evalo anonymous course feedback API",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)


# Set up CORS middleware
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Global exception handlers
@app.exception_handler(BaseApplicationError)
async def application_exception_handler(request: Request, exc: BaseApplicationError) -> Any:
    """
    Map application errors to HTTP responses
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_code": exc.error_code},
        headers=headers,
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> Any:
    """
    Global exception handler for SQLAlchemy errors
    """
    logger.error(f"Database error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"detail": "A database error occurred"},
    )


# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root() -> dict:
    """
    Root endpoint - health check
    """
    return {"status": "online", "app": settings.PROJECT_NAME, "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("evalo.main:app", host="0.0.0.0", port=8000, reload=True)
