"""SCIM модели данных согласно RFC 7644"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class SCIMSchema(str, Enum):
    """SCIM схемы"""
    USER = "urn:ietf:params:scim:schemas:core:2.0:User"
    GROUP = "urn:ietf:params:scim:schemas:core:2.0:Group"
    LIST_RESPONSE = "urn:ietf:params:scim:api:messages:2.0:ListResponse"
    PATCH_OP = "urn:ietf:params:scim:api:messages:2.0:PatchOp"
    ERROR = "urn:ietf:params:scim:api:messages:2.0:Error"
    SERVICE_PROVIDER_CONFIG = "urn:ietf:params:scim:schemas:core:2.0:ServiceProviderConfig"
    RESOURCE_TYPE = "urn:ietf:params:scim:schemas:core:2.0:ResourceType"


class ListResponse(BaseModel):
    """Ответ со списком ресурсов SCIM"""
    schemas: List[str] = Field(default_factory=lambda: [SCIMSchema.LIST_RESPONSE.value])
    totalResults: int
    startIndex: int = 1
    itemsPerPage: int
    Resources: List[Dict[str, Any]] = Field(default_factory=list)


class SCIMError(BaseModel):
    """Ошибка SCIM"""
    schemas: List[str] = Field(default_factory=lambda: [SCIMSchema.ERROR.value])
    status: int
    scimType: Optional[str] = None
    detail: Optional[str] = None


class PatchOperation(BaseModel):
    """PATCH операция SCIM"""
    op: str  # add, remove, replace
    path: Optional[str] = None
    value: Optional[Any] = None

    @property
    def has_value(self) -> bool:
        """Передано ли поле value в запросе (в том числе null)"""
        return "value" in self.model_fields_set


class PatchRequest(BaseModel):
    """PATCH запрос SCIM"""
    schemas: List[str] = Field(default_factory=lambda: [SCIMSchema.PATCH_OP.value])
    Operations: List[PatchOperation]
