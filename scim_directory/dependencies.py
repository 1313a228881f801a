"""Зависимости FastAPI: арендатор запроса и сервисы ресурсов"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from .config import ScimConfig
from .database import get_session
from .models.db import Company
from .repositories.sql import SqlCompanyRepository, SqlGroupRepository, SqlUserRepository
from .services.directory import GroupService, UserService
from .utils.exceptions import InvalidCredentialsError

logger = logging.getLogger(__name__)

basic_auth = HTTPBasic(auto_error=False)


def get_scim_config(request: Request) -> ScimConfig:
    return request.app.state.scim_config


async def get_tenant(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    session: AsyncSession = Depends(get_session),
) -> Company:
    """Арендатор по HTTP Basic: имя пользователя - subdomain, пароль - api_token"""
    if credentials is None:
        raise InvalidCredentialsError()

    company = await SqlCompanyRepository(session).authenticate(credentials.username, credentials.password)
    if company is None:
        logger.warning(f"Authentication failed for subdomain '{credentials.username}'")
        raise InvalidCredentialsError()
    return company


def get_user_service(
    session: AsyncSession = Depends(get_session),
    config: ScimConfig = Depends(get_scim_config),
) -> UserService:
    return UserService(SqlUserRepository(session, config.users), config)


def get_group_service(
    session: AsyncSession = Depends(get_session),
    config: ScimConfig = Depends(get_scim_config),
) -> GroupService:
    return GroupService(
        SqlGroupRepository(session, config.groups),
        SqlUserRepository(session, config.users),
        config,
    )
