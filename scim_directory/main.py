"""Основное FastAPI приложение для SCIM Directory Service"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from .config import ScimConfig, Settings, build_scim_config, get_settings
from .database import create_engine, create_session_factory, create_tables
from .models.scim import SCIMError
from .routers import (
    groups_router,
    health_router,
    resource_types_router,
    service_provider_config_router,
    users_router,
)
from .utils.exceptions import SCIMDirectoryError
from .utils.responses import SCIMResponse

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Настройка логирования"""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def _error_response(status_code: int, detail: str, scim_type: Optional[str] = None) -> SCIMResponse:
    error_response = SCIMError(
        status=status_code,
        scimType=scim_type,
        detail=detail
    )
    return SCIMResponse(
        status_code=status_code,
        content=error_response.model_dump(exclude_none=True)
    )


def create_app(
    settings: Optional[Settings] = None,
    scim_config: Optional[ScimConfig] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """Собирает приложение; конфигурация SCIM фиксируется здесь и дальше не меняется"""
    settings = settings or get_settings()
    scim_config = scim_config or build_scim_config(settings)
    engine = engine or create_engine(settings)

    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        # Startup
        logger.info("Starting SCIM Directory Service...")
        logger.info(f"Database: {engine.url.render_as_string(hide_password=True)}")
        if settings.create_tables:
            await create_tables(engine)

        yield

        # Shutdown
        logger.info("Shutting down SCIM Directory Service...")
        await engine.dispose()

    app = FastAPI(
        title="SCIM Directory Service",
        description="SCIM 2.0 сервис пользователей и групп поверх реляционной базы данных",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        default_response_class=SCIMResponse,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.scim_config = scim_config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Настройка CORS
    cors_origins = settings.cors_origins.split(",") if settings.cors_origins != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Обработчик исключений SCIM Directory
    @app.exception_handler(SCIMDirectoryError)
    async def scim_directory_exception_handler(request: Request, exc: SCIMDirectoryError):
        """Ошибки ядра в формате SCIM Error"""
        if exc.status_code >= 500:
            logger.error(f"SCIM Directory Error: {exc.message}")
        else:
            logger.warning(f"SCIM Directory Error {exc.status_code}: {exc.message}")

        response = _error_response(exc.status_code, exc.message, exc.scim_type)
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = 'Basic realm="SCIM"'
        return response

    # Обработчик общих HTTP исключений
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Обработчик HTTP исключений"""
        logger.error(f"HTTP Error: {exc.detail}")
        return _error_response(exc.status_code, str(exc.detail))

    # Некорректное тело или параметры запроса
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Ошибки валидации запроса как SCIM invalidSyntax"""
        logger.warning(f"Request validation failed: {exc.errors()}")
        return _error_response(400, f"Invalid request: {exc.errors()}", "invalidSyntax")

    # Обработчик неожиданных исключений
    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Обработчик неожиданных исключений"""
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        return _error_response(500, "Internal server error")

    # Middleware для логирования запросов
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Middleware для логирования HTTP запросов"""
        start_time = time.time()

        logger.info(f"Request: {request.method} {request.url.path}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"Response: {response.status_code} - {process_time:.3f}s")

        return response

    # Подключение роутеров
    app.include_router(health_router)

    prefix = settings.scim_path_prefix.rstrip("/")
    app.include_router(users_router, prefix=prefix)
    app.include_router(groups_router, prefix=prefix)
    app.include_router(service_provider_config_router, prefix=prefix)
    app.include_router(resource_types_router, prefix=prefix)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "scim_directory.main:create_app",
        factory=True,
        host=settings.server_host,
        port=settings.server_port,
        reload=True,
        log_level=settings.log_level.lower()
    )
