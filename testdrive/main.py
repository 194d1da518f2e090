# testdrive/main.py
"""Application factory.

Everything with a lifecycle (engine, session factory, token service, Firebase
verifier) is built here and kept on ``app.state``.
"""
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.routes import router as api_router
from .config import Settings
from .db import init_db, make_engine, make_session_factory
from .errors import ServiceError, format_validation_errors
from .security import FirebaseVerifier, TokenService
from .utils import configure_logging, get_logger

logger = get_logger("app")


def register_error_handlers(app: FastAPI):

    @app.exception_handler(ServiceError)
    async def service_error(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": format_validation_errors(exc.errors())})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = exc.detail if exc.status_code != 404 or exc.detail != "Not Found" \
            else f"Not Found - {request.url.path}"
        return JSONResponse(status_code=exc.status_code, content={"message": message},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"message": "Server error"}
        if app.state.settings.is_development:
            content["detail"] = repr(exc)
        return JSONResponse(status_code=500, content=content)


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Test Drive Marketplace API")
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url, settings.db_pool_size, settings.db_max_overflow)
    app.state.session_factory = make_session_factory(app.state.engine)
    app.state.tokens = TokenService(settings.jwt_secret, settings.jwt_algorithm, settings.jwt_expires_days)
    app.state.firebase = FirebaseVerifier(settings.firebase_project_id)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    def read_root():
        return "API is running..."

    app.include_router(api_router, prefix=settings.api_prefix)

    os.makedirs(settings.upload_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    @app.on_event("startup")
    def on_startup_create_tables():
        # Ensure database tables are created on startup
        init_db(app.state.engine)
        logger.info("Database ready (%s)", app.state.engine.url.render_as_string(hide_password=True))

    @app.on_event("shutdown")
    def on_shutdown_dispose_engine():
        app.state.engine.dispose()

    return app


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 5000))
    uvicorn.run(create_app(), host="0.0.0.0", port=port)
