"""Groups роутер для SCIM API"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from ..dependencies import get_tenant, get_group_service
from ..models.db import Company
from ..models.scim import PatchRequest
from ..services.directory import GroupService

router = APIRouter(prefix="/Groups", tags=["groups"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_groups(
    filter: Optional[str] = Query(None, description="SCIM filter expression"),
    start_index: Optional[str] = Query(None, alias="startIndex", description="1-based index of the first result"),
    count: Optional[str] = Query(None, description="Number of results per page"),
    tenant: Company = Depends(get_tenant),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Получение списка групп с поддержкой фильтрации"""
    logger.info(f"Processing request with filter: {filter}")
    return await service.list(tenant, filter, start_index, count)


@router.get("/{group_id}")
async def get_group(
    group_id: str,
    tenant: Company = Depends(get_tenant),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Получение группы по ID"""
    return await service.show(tenant, group_id)


@router.post("", status_code=201)
async def create_group(
    payload: Dict[str, Any] = Body(...),
    tenant: Company = Depends(get_tenant),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Создание группы (или обновление существующей с тем же displayName)"""
    return await service.create(tenant, payload)


@router.put("/{group_id}")
async def update_group(
    group_id: str,
    payload: Dict[str, Any] = Body(...),
    tenant: Company = Depends(get_tenant),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Полная замена группы, включая состав"""
    return await service.replace(tenant, group_id, payload)


@router.patch("/{group_id}")
async def patch_group(
    group_id: str,
    patch_request: PatchRequest,
    tenant: Company = Depends(get_tenant),
    service: GroupService = Depends(get_group_service),
) -> Dict[str, Any]:
    """Частичное обновление группы и ее состава"""
    return await service.patch(tenant, group_id, patch_request.Operations)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    tenant: Company = Depends(get_tenant),
    service: GroupService = Depends(get_group_service),
) -> Response:
    """Удаление группы"""
    await service.delete(tenant, group_id)
    return Response(status_code=204)
