"""ServiceProviderConfig роутер для SCIM API"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..config import ScimConfig
from ..dependencies import get_scim_config

router = APIRouter(tags=["service-provider-config"])


@router.get("/ServiceProviderConfig")
async def get_service_provider_config(config: ScimConfig = Depends(get_scim_config)) -> Dict[str, Any]:
    """Возвращает конфигурацию SCIM сервиса согласно RFC 7644"""
    return dict(config.service_provider_config)
