import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from api.routes.chat import router as chat_router
from api.routes.products import router as products_router
from loanchat.config import Config, Settings
from loanchat.database.db.session import create_db_engine, create_session_factory, init_schema
from loanchat.errors import GenerationError, StorageError, ValidationError
from loanchat.logging_setup import setup_logging
from loanchat.service.llm_service import GenerationClient, init_litellm

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    generation_client: Optional[GenerationClient] = None,
) -> FastAPI:
    """
    Build the API.

    Collaborators that are not passed in are created once, at startup.
    """
    settings = settings or Config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.logging)

        if app.state.session_factory is None:
            engine = create_db_engine(settings.database_url)
            # Create any missing tables on startup
            init_schema(engine)
            app.state.session_factory = create_session_factory(engine)

        if app.state.generation_client is None:
            init_litellm(settings.generation)
            app.state.generation_client = GenerationClient(settings.generation)

        logger.info(f"🚀 Loan chat API started, model: {settings.generation.model}")
        yield

    app = FastAPI(title="Loan Chat API", lifespan=lifespan)
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.generation_client = generation_client

    # development allows every origin; credentials cannot be combined with "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_dev else settings.cors_origins,
        allow_credentials=not settings.is_dev,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    app.include_router(chat_router)
    app.include_router(products_router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok"}

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"❌ Storage error on {request.url.path}: {exc.details}")
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "details": exc.details},
        )

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError):
        logger.error(f"❌ API Error Details: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "details": exc.details},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"❌ Unhandled error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": type(exc).__name__},
        )


app = create_app()
