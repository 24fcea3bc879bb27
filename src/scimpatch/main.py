from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from tortoise import Tortoise
from scimpatch.config import Settings, settings as default_settings
from scimpatch.exceptions import SCIMException
from scimpatch.middleware import ErrorHandlerMiddleware, RequestLoggingMiddleware, scim_error_response
from scimpatch.api.v2.router import router as v2_router
from scimpatch.services import LoggingPatchApplier, PatchApplier
from scimpatch.utils import logger, setup_logging
from scimpatch.schemas import ErrorResponse


def create_app(
    settings: Optional[Settings] = None,
    patch_applier: Optional[PatchApplier] = None,
    init_db: bool = True,
) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name}...")
        if init_db:
            await Tortoise.init(config=settings.tortoise_orm_config)
            await Tortoise.generate_schemas()
            logger.info("Database connection established")

        yield

        logger.info(f"Shutting down {settings.app_name}...")
        if init_db:
            await Tortoise.close_connections()
            logger.info("Database connections closed")

    app = FastAPI(
        title=settings.app_name,
        description="SCIM 2.0 PATCH operation service",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(v2_router, prefix=settings.api_prefix)

    # Schema configuration is built once and shared read-only by all requests
    app.state.settings = settings
    app.state.schema_config = settings.schema_config()
    app.state.patch_applier = patch_applier or LoggingPatchApplier()

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.environment,
            "version": "1.0.0"
        }

    @app.exception_handler(SCIMException)
    async def scim_exception_handler(request: Request, exc: SCIMException):
        logger.warning(f"SCIM error on {request.method} {request.url.path}: {exc.detail}")
        return scim_error_response(exc)

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc):
        error = ErrorResponse(
            status=404,
            detail=f"Path {request.url.path} not found"
        )
        return JSONResponse(
            status_code=404,
            content=error.model_dump(by_alias=True)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(
            f"Validation error for {request.method} {request.url.path}\n"
            f"Errors: {exc.errors()}"
        )

        error = ErrorResponse(
            status=400,
            detail="Invalid request body",
            scim_type="invalidValue"
        )
        if settings.debug:
            error.detail = "Validation error: " + "; ".join(f"{err['loc']}: {err['msg']}" for err in exc.errors())

        return JSONResponse(
            status_code=400,
            content=error.model_dump(by_alias=True)
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scimpatch.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.reload,
        log_level=default_settings.log_level.lower(),
    )
