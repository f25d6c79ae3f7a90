"""RoboAudit FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roboaudit import __version__
from roboaudit.api.audits import router as audits_router
from roboaudit.api.health import router as health_router
from roboaudit.config import SAMPLE_ENV, Settings, load_settings
from roboaudit.database import build_engine, build_session_maker, create_tables
from roboaudit.errors import (
    INTERNAL_ERROR_MESSAGE,
    VALIDATION_ERROR_MESSAGE,
    ConfigurationError,
    RoboAuditError,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

BANNER = (
    f"RoboAudit v{__version__} - An API for managing your LLM usage audits.\n"
    "==========================================================\n"
    "This software is made available under the MIT license.\n"
    "=========================================================="
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = app.state.engine
    await create_tables(engine)
    logger.info("Database tables ready")
    yield
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around one immutable Settings object."""
    if settings is None:
        settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)

    app = FastAPI(
        title="RoboAudit",
        description="An API for managing your LLM usage audits",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_maker = build_session_maker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(audits_router, tags=["Audits"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"service": "RoboAudit", "version": __version__, "docs": "/docs"}

    return app


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        location, *path = error["loc"]
        errors.append(
            {
                "location": location,
                "field": ".".join(str(part) for part in path),
                "msg": error["msg"],
            }
        )
    return errors


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RoboAuditError)
    async def roboaudit_error_handler(
        request: Request, exc: RoboAuditError
    ) -> JSONResponse:
        logger.warning(
            "%s %s -> %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _validation_errors(exc)
        logger.warning("%s %s rejected: %s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder({"msg": VALIDATION_ERROR_MESSAGE, "errors": errors}),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"msg": INTERNAL_ERROR_MESSAGE})


def run() -> None:
    """Console entry point: validate configuration, then serve."""
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.error(
            "%s\nCreate a .env file with the following variables...\n%s",
            exc,
            SAMPLE_ENV,
        )
        raise SystemExit(1) from exc

    app = create_app(settings)
    logger.info(
        "%s\nServer started at %s\nListening on port: %s",
        BANNER,
        datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT"),
        settings.port,
    )
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
