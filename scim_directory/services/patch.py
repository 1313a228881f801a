"""Интерпретатор SCIM PATCH операций (RFC 7644, 3.5.2)

Операции применяются строго по порядку, каждая видит результат предыдущих.
Первая же ошибка прерывает запрос.
"""

import logging
import re
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from ..models.db import Company
from ..models.schema_map import ArrayNode, ObjectNode, SchemaNode
from ..models.scim import PatchOperation
from ..utils.exceptions import (
    BadPatchPathError,
    InvalidActiveParamError,
    InvalidFilterError,
    InvalidPatchFilterError,
    InvalidPatchValueError,
    UnsupportedPatchRequestError,
)
from .filter_parser import FilterParser
from .membership import INVALID_PATCH_MEMBERS, member_identifiers

if TYPE_CHECKING:
    from .directory import GroupService, ResourceService

logger = logging.getLogger(__name__)

# members[value eq "..."] -> атрибут, фильтр внутри скобок, остаток после скобок
BRACKET_PATH_PATTERN = re.compile(r"^(?P<attribute>[^\[\]]+)\[(?P<filter>[^\[\]]*)\](?P<suffix>.*)$")


def parse_active(value: Any) -> Optional[bool]:
    """true / "true" / 1 -> True, false / "false" / 0 -> False, None -> None, иначе ошибка"""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
    if value == "true":
        return True
    if value == "false":
        return False
    raise InvalidActiveParamError(value)


def nest_path(node: Optional[SchemaNode], segments: List[str], value: Any) -> Any:
    """Строит частичный ресурс из path вида "name.givenName" с учетом массивов схемы"""
    if not segments:
        return value
    if isinstance(node, ArrayNode):
        first = node.items[0] if node.items else None
        return [nest_path(first, segments, value)]
    child = node.children.get(segments[0]) if isinstance(node, ObjectNode) else None
    return {segments[0]: nest_path(child, segments[1:], value)}


Handler = Callable[[Company, Any, PatchOperation], Awaitable[None]]


class PatchInterpreter:
    """PATCH для ресурсов без состава (пользователи): только replace"""

    unsupported_message = "Invalid PATCH request. This PATCH endpoint only supports 'replace' operations."

    def __init__(self, service: "ResourceService"):
        self.service = service
        self.handlers: Dict[str, Handler] = {
            "replace": self.replace,
        }

    async def apply(self, tenant: Company, resource: Any, operations: List[PatchOperation]) -> None:
        """Применяет операции по порядку"""
        for index, operation in enumerate(operations):
            handler = self.handlers.get(str(operation.op).lower())
            if handler is None:
                logger.warning(f"Unsupported PATCH operation '{operation.op}' at position {index}")
                raise UnsupportedPatchRequestError(self.unsupported_message)

            logger.info(f"Applying PATCH {operation.op} path={operation.path!r} to {resource.uuid}")
            await handler(tenant, resource, operation)

            if not self.service.config.atomic_patch:
                await self.service.repository.commit()

    async def replace(self, tenant: Company, resource: Any, operation: PatchOperation) -> None:
        """replace: замена атрибутов ресурса"""
        await self.replace_attributes(tenant, resource, operation)

    async def replace_attributes(self, tenant: Company, resource: Any, operation: PatchOperation) -> None:
        """Частичная замена атрибутов; применяются только известные и непустые"""
        path = operation.path
        mutable_schema = self.service.resource.mutable_schema

        if path:
            if "[" in path or "]" in path:
                raise BadPatchPathError(path)
            value = nest_path(mutable_schema, path.split("."), operation.value)
        else:
            value = operation.value

        if not isinstance(value, dict):
            raise InvalidPatchValueError(
                "Invalid PATCH request. A 'replace' operation without a path requires an object value."
            )

        attributes = self.service.mapper.extract(mutable_schema, value, compact=True)
        status = parse_active(value.get("active"))

        if attributes:
            await self.service.update_attributes(tenant, resource, attributes)
        if status is not None:
            await self.service.apply_status(resource, status)


class GroupPatchInterpreter(PatchInterpreter):
    """PATCH для групп: add / remove / replace, включая состав"""

    unsupported_message = "Invalid PATCH request. Supported operations are 'add', 'remove' and 'replace'."

    def __init__(self, service: "GroupService"):
        super().__init__(service)
        self.membership = service.membership
        # атрибуты участника (value -> uuid) как колонки фильтра в скобках
        self.member_filter = FilterParser(self.membership.member_attributes)
        self.handlers.update({
            "add": self.add,
            "remove": self.remove,
        })

    async def replace(self, tenant: Company, resource: Any, operation: PatchOperation) -> None:
        """replace: состав целиком (path members) или атрибуты группы"""
        if operation.path == "members":
            identifiers = member_identifiers(operation.value, INVALID_PATCH_MEMBERS)
            users = await self.membership.resolve(tenant, identifiers)
            await self.membership.replace(resource, users)
            return

        await self.replace_attributes(tenant, resource, operation)

    async def add(self, tenant: Company, resource: Any, operation: PatchOperation) -> None:
        """add: добавление участников; повторы и уже состоящие пропускаются"""
        if operation.path not in (None, "members"):
            raise BadPatchPathError(operation.path)

        value = operation.value
        if operation.path is None and isinstance(value, dict) and "members" in value:
            value = value["members"]

        identifiers = member_identifiers(value, INVALID_PATCH_MEMBERS)
        users = await self.membership.resolve(tenant, identifiers)
        await self.membership.add(resource, users)

    async def remove(self, tenant: Company, resource: Any, operation: PatchOperation) -> None:
        """remove: перечисленные участники, все участники или участники по фильтру в скобках"""
        path = operation.path

        if path == "members":
            if operation.has_value:
                identifiers = member_identifiers(operation.value, INVALID_PATCH_MEMBERS)
                await self.membership.remove(resource, identifiers)
            else:
                await self.membership.clear(resource)
            return

        match = BRACKET_PATH_PATTERN.match(path or "")
        if not match or match.group("attribute") != "members" or match.group("suffix"):
            raise BadPatchPathError(path)

        try:
            expression = self.member_filter.parse(match.group("filter"))
        except InvalidFilterError as error:
            raise InvalidPatchFilterError(f"Invalid PATCH request. {error.message}")

        await self.membership.remove_matching(tenant, resource, expression)
