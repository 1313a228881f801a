"""Модели данных для SCIM Directory Service"""

from .scim import SCIMSchema, ListResponse, SCIMError, PatchOperation, PatchRequest
from .filters import FilterExpression, FilterOperator
from .schema_map import Constant, FieldRef, ObjectNode, ArrayNode, SchemaNode, compile_schema, schema_fields, field_map
from .db import Base, Company, User, Group, GroupMembership

__all__ = [
    "SCIMSchema",
    "ListResponse",
    "SCIMError",
    "PatchOperation",
    "PatchRequest",
    "FilterExpression",
    "FilterOperator",
    "Constant",
    "FieldRef",
    "ObjectNode",
    "ArrayNode",
    "SchemaNode",
    "compile_schema",
    "schema_fields",
    "field_map",
    "Base",
    "Company",
    "User",
    "Group",
    "GroupMembership",
]
