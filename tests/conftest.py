"""Общие фикстуры тестов SCIM Directory Service"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from scim_directory.config import Settings, build_scim_config
from scim_directory.database import create_session_factory, create_tables
from scim_directory.main import create_app
from scim_directory.models.db import Company

from .factories import create_company


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path}/scim_test.db",
        create_tables=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(settings: Settings):
    """База в отдельном файле для каждого теста"""
    engine = create_async_engine(settings.database_url, echo=False)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return create_session_factory(engine)


@pytest.fixture
def scim_config(settings: Settings):
    return build_scim_config(settings)


@pytest.fixture
def app(settings, scim_config, engine):
    return create_app(settings=settings, scim_config=scim_config, engine=engine)


@pytest_asyncio.fixture
async def company(session_factory) -> Company:
    return await create_company(session_factory)


@pytest_asyncio.fixture
async def client(app, company) -> AsyncGenerator[AsyncClient, None]:
    """Клиент с HTTP Basic арендатора company"""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        auth=(company.subdomain, company.api_token),
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def anonymous_client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_client(settings, engine, company):
    """Клиент для приложения с отдельной конфигурацией SCIM"""
    def make(scim_config=None, auth=None) -> AsyncClient:
        app = create_app(
            settings=settings,
            scim_config=scim_config or build_scim_config(settings),
            engine=engine,
        )
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            auth=auth or (company.subdomain, company.api_token),
        )
    return make
