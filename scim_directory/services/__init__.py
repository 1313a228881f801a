"""Сервисы для SCIM Directory Service"""

from .filter_parser import FilterParser
from .schema_mapper import SchemaMapper
from .pagination import PaginationCounter, PageWindow
from .membership import MembershipManager
from .serializer import ResourceSerializer, GroupSerializer
from .patch import PatchInterpreter, GroupPatchInterpreter, parse_active
from .directory import ResourceEvent, ResourceService, UserService, GroupService

__all__ = [
    "FilterParser",
    "SchemaMapper",
    "PaginationCounter",
    "PageWindow",
    "MembershipManager",
    "ResourceSerializer",
    "GroupSerializer",
    "PatchInterpreter",
    "GroupPatchInterpreter",
    "parse_active",
    "ResourceEvent",
    "ResourceService",
    "UserService",
    "GroupService",
]
