"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deployhook import __version__
from deployhook.api.middleware import RequestLoggingMiddleware
from deployhook.api.v1.router import router as v1_router
from deployhook.config import settings
from deployhook.core.exceptions import (
    DeployHookError,
    DuplicateEnvironmentError,
    EnvironmentNotFoundError,
)
from deployhook.services.github import get_github_client
from deployhook.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

ERROR_STATUS_CODES: dict[type[DeployHookError], int] = {
    EnvironmentNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateEnvironmentError: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    if not settings.github_webhook_secret:
        logger.warning("github_webhook_secret not set - every delivery will be rejected")
    logger.info(
        "application.starting",
        version=__version__,
        environment=settings.app_env,
    )

    yield

    await get_github_client().close()
    logger.info("application.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="deployhook API",
        description="Turns GitHub push, status and deployment webhooks into deployments",
        version=__version__,
        docs_url="/docs" if settings.app_debug else None,
        redoc_url="/redoc" if settings.app_debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(DeployHookError)
    async def deployhook_error_handler(
        request: Request, exc: DeployHookError
    ) -> JSONResponse:
        """Handle application-specific errors."""
        status_code = ERROR_STATUS_CODES.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )

        return JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "code": type(exc).__name__.upper(),
                    "message": exc.message,
                    "details": exc.details,
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            path=request.url.path,
            exc_info=True,
        )

        if settings.is_development:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": str(exc),
                        "type": type(exc).__name__,
                    }
                },
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                }
            },
        )

    app.include_router(v1_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "deployhook.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
