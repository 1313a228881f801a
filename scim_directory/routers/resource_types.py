"""ResourceTypes роутер для SCIM API"""

from typing import Any, Dict

from fastapi import APIRouter

from ..models.scim import ListResponse, SCIMSchema
from ..utils.exceptions import ResourceNotFoundError

router = APIRouter(tags=["resource-types"])

RESOURCE_TYPES: Dict[str, Dict[str, Any]] = {
    "User": {
        "schemas": [SCIMSchema.RESOURCE_TYPE.value],
        "id": "User",
        "name": "User",
        "endpoint": "/Users",
        "description": "User Account",
        "schema": SCIMSchema.USER.value,
        "meta": {
            "location": "/ResourceTypes/User",
            "resourceType": "ResourceType"
        }
    },
    "Group": {
        "schemas": [SCIMSchema.RESOURCE_TYPE.value],
        "id": "Group",
        "name": "Group",
        "endpoint": "/Groups",
        "description": "Group",
        "schema": SCIMSchema.GROUP.value,
        "meta": {
            "location": "/ResourceTypes/Group",
            "resourceType": "ResourceType"
        }
    },
}


@router.get("/ResourceTypes")
async def get_resource_types() -> Dict[str, Any]:
    """Возвращает список поддерживаемых типов ресурсов согласно RFC 7644"""
    resources = list(RESOURCE_TYPES.values())
    return ListResponse(
        totalResults=len(resources),
        itemsPerPage=len(resources),
        Resources=resources,
    ).model_dump()


@router.get("/ResourceTypes/{name}")
async def get_resource_type(name: str) -> Dict[str, Any]:
    """Возвращает информацию об одном типе ресурса"""
    resource_type = RESOURCE_TYPES.get(name)
    if resource_type is None:
        raise ResourceNotFoundError(name)
    return resource_type
