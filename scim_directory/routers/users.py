"""Users роутер для SCIM API"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from ..dependencies import get_tenant, get_user_service
from ..models.db import Company
from ..models.scim import PatchRequest
from ..services.directory import UserService

router = APIRouter(prefix="/Users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_users(
    filter: Optional[str] = Query(None, description="SCIM filter expression"),
    start_index: Optional[str] = Query(None, alias="startIndex", description="1-based index of the first result"),
    count: Optional[str] = Query(None, description="Number of results per page"),
    tenant: Company = Depends(get_tenant),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Получение списка пользователей с поддержкой фильтрации"""
    logger.info(f"Processing request with filter: {filter}")
    return await service.list(tenant, filter, start_index, count)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    tenant: Company = Depends(get_tenant),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Получение пользователя по ID"""
    return await service.show(tenant, user_id)


@router.post("", status_code=201)
async def create_user(
    payload: Dict[str, Any] = Body(...),
    tenant: Company = Depends(get_tenant),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Создание пользователя (или обновление существующего с тем же email)"""
    return await service.create(tenant, payload)


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: Dict[str, Any] = Body(...),
    tenant: Company = Depends(get_tenant),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Полное обновление пользователя"""
    return await service.replace(tenant, user_id, payload)


@router.patch("/{user_id}")
async def patch_user(
    user_id: str,
    patch_request: PatchRequest,
    tenant: Company = Depends(get_tenant),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Частичное обновление пользователя"""
    return await service.patch(tenant, user_id, patch_request.Operations)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    tenant: Company = Depends(get_tenant),
    service: UserService = Depends(get_user_service),
) -> Response:
    """Удаление пользователя"""
    await service.delete(tenant, user_id)
    return Response(status_code=204)
