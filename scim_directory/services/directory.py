"""Сервисы SCIM ресурсов: список, чтение, создание, замена, PATCH, удаление

Сервис работает в рамках одной сессии хранилища (одного запроса) и
фиксирует изменения только после успешного завершения операции.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..config import ResourceConfig, ScimConfig
from ..models.db import Company, Group, User
from ..models.scim import PatchOperation
from ..repositories.base import GroupRepository, ResourceRepository, UserRepository
from ..utils.exceptions import InvalidAttributesError, ResourceConflictError
from .filter_parser import FilterParser
from .membership import MembershipManager, member_identifiers, INVALID_PUT_MEMBERS
from .pagination import PaginationCounter
from .patch import GroupPatchInterpreter, PatchInterpreter, parse_active
from .schema_mapper import SchemaMapper
from .serializer import GroupSerializer, ResourceSerializer

logger = logging.getLogger(__name__)

INVALID_POST_MEMBERS = (
    "Invalid POST request. The 'members' attribute of the request must be "
    "an array of objects with a 'value'."
)


class ResourceEvent(str, Enum):
    """События для after_response"""
    RETRIEVED = "RETRIEVED"
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


class ResourceService:
    """Операции над одним типом ресурса"""

    patch_interpreter_class = PatchInterpreter

    def __init__(
        self,
        repository: ResourceRepository,
        resource: ResourceConfig,
        config: ScimConfig,
        serializer: ResourceSerializer,
        mapper: Optional[SchemaMapper] = None,
    ):
        self.repository = repository
        self.resource = resource
        self.config = config
        self.serializer = serializer
        self.mapper = mapper or SchemaMapper()
        self.filter_parser = FilterParser(resource.queryable_attributes)
        self.pagination = PaginationCounter(config.default_page_size, config.max_page_size)

    # Хуки

    def _before_response(self, params: Dict[str, Any]) -> None:
        if self.config.hooks.before_response is not None:
            self.config.hooks.before_response(params)

    def _after_response(self, resource: Any, event: ResourceEvent) -> None:
        if self.config.hooks.after_response is not None:
            self.config.hooks.after_response(resource, event.value)

    # Операции

    async def list(
        self,
        tenant: Company,
        filter_string: Optional[str] = None,
        start_index: Optional[Union[int, str]] = None,
        count: Optional[Union[int, str]] = None,
    ) -> Dict[str, Any]:
        """ListResponse с учетом фильтра и пагинации"""
        self._before_response({"filter": filter_string, "startIndex": start_index, "count": count})

        window = self.pagination.window(start_index, count)
        expression = self.filter_parser.parse(filter_string) if filter_string else None

        page = await self.repository.query(
            tenant,
            expression,
            order=self.resource.list_order,
            offset=window.offset,
            limit=window.limit,
        )
        logger.info(
            f"Listed {len(page.items)} of {page.total} {self.resource.name} resources "
            f"for company {tenant.id} (filter={filter_string!r})"
        )

        self._after_response(page.items, ResourceEvent.RETRIEVED)
        return await self.serializer.render_list(page, window)

    async def show(self, tenant: Company, identifier: Any) -> Dict[str, Any]:
        """Один ресурс арендатора по идентификатору"""
        self._before_response({"id": identifier})
        resource = await self.repository.get(tenant, identifier)
        self._after_response(resource, ResourceEvent.RETRIEVED)
        return await self.serializer.render(resource)

    async def create(self, tenant: Company, payload: Any) -> Dict[str, Any]:
        """Создание с upsert по естественному ключу

        При prevent_update_on_create существующий ресурс с тем же ключом - 409,
        иначе он обновляется атрибутами запроса.
        """
        self._before_response(payload if isinstance(payload, dict) else {})

        attributes = self._required_attributes(payload)
        active = parse_active(payload.get("active"))
        members = await self._members_for_create(tenant, payload)

        natural_value = attributes[self.resource.natural_key]
        existing = await self.repository.find_by(
            tenant,
            self.resource.natural_key,
            natural_value,
            ignore_case=self.resource.natural_key_ignore_case,
            for_update=True,
        )

        if existing is not None and self.resource.prevent_update_on_create:
            raise ResourceConflictError(
                f"{self.resource.name} with {self.resource.natural_key} '{natural_value}' already exists"
            )

        attributes = {**self.resource.custom_attributes, **attributes}
        if existing is None:
            resource = await self.repository.create(tenant, attributes)
        else:
            logger.info(f"{self.resource.name} {existing.uuid} matched on create, updating")
            resource = await self.repository.update(existing, attributes)

        if active is not None:
            await self.apply_status(resource, active)
        await self._after_create(resource, members)

        await self.repository.commit()
        self._after_response(resource, ResourceEvent.CREATED)
        return await self.serializer.render(resource)

    async def replace(self, tenant: Company, identifier: Any, payload: Any) -> Dict[str, Any]:
        """PUT: полная замена изменяемых атрибутов"""
        self._before_response(payload if isinstance(payload, dict) else {})

        resource = await self.repository.get(tenant, identifier, for_update=True)
        members = await self._members_for_replace(tenant, payload)
        active = parse_active(payload.get("active")) if isinstance(payload, dict) else None
        attributes = self._required_attributes(payload)

        await self.update_attributes(tenant, resource, attributes)
        if active is not None:
            await self.apply_status(resource, active)
        await self._after_replace(resource, members)

        await self.repository.commit()
        self._after_response(resource, ResourceEvent.UPDATED)
        return await self.serializer.render(resource)

    async def patch(self, tenant: Company, identifier: Any, operations: List[PatchOperation]) -> Dict[str, Any]:
        """PATCH: операции применяются по порядку, фиксация после последней"""
        self._before_response({"id": identifier, "Operations": [op.model_dump() for op in operations]})

        resource = await self.repository.get(tenant, identifier, for_update=True)
        await self.patch_interpreter_class(self).apply(tenant, resource, operations)

        await self.repository.commit()
        self._after_response(resource, ResourceEvent.UPDATED)
        return await self.serializer.render(resource)

    async def delete(self, tenant: Company, identifier: Any) -> None:
        """Удаляет ресурс вместе со связями состава"""
        self._before_response({"id": identifier})

        resource = await self.repository.get(tenant, identifier, for_update=True)
        await self.repository.delete(resource)

        await self.repository.commit()
        self._after_response(resource, ResourceEvent.DELETED)

    # Общие шаги записи

    async def update_attributes(self, tenant: Company, resource: Any, attributes: Dict[str, Any]) -> None:
        """Записывает атрибуты; уникальный естественный ключ не может совпасть с чужим"""
        key = self.resource.natural_key
        if self.resource.unique_natural_key and attributes.get(key) is not None:
            other = await self.repository.find_by(
                tenant, key, attributes[key], ignore_case=self.resource.natural_key_ignore_case
            )
            if other is not None and other.id != resource.id:
                raise ResourceConflictError(
                    f"{self.resource.name} with {key} '{attributes[key]}' already exists"
                )

        await self.repository.update(resource, attributes)

    async def apply_status(self, resource: Any, active: bool) -> None:
        """active=True восстанавливает ресурс, False - архивирует"""
        if active:
            await self.repository.reprovision(resource)
        else:
            await self.repository.deprovision(resource)
        logger.info(f"{self.resource.name} {resource.uuid} active={active}")

    def _required_attributes(self, payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise InvalidAttributesError("Invalid request. The request body must be a JSON object.")

        attributes = self.mapper.extract(self.resource.mutable_schema, payload)
        missing = [name for name in self.resource.required_attributes if attributes.get(name) in (None, "")]
        if missing:
            raise InvalidAttributesError(
                f"Invalid request. Missing required attributes: {', '.join(missing)}"
            )
        return attributes

    async def _members_for_create(self, tenant: Company, payload: Dict[str, Any]) -> Optional[List[User]]:
        return None

    async def _members_for_replace(self, tenant: Company, payload: Any) -> Optional[List[User]]:
        return None

    async def _after_create(self, resource: Any, members: Optional[List[User]]) -> None:
        pass

    async def _after_replace(self, resource: Any, members: Optional[List[User]]) -> None:
        pass


class UserService(ResourceService):
    """Пользователи"""

    def __init__(self, users: UserRepository, config: ScimConfig, mapper: Optional[SchemaMapper] = None):
        mapper = mapper or SchemaMapper()
        super().__init__(
            users,
            config.users,
            config,
            ResourceSerializer(mapper, config.users.schema),
            mapper,
        )


class GroupService(ResourceService):
    """Группы и их состав"""

    patch_interpreter_class = GroupPatchInterpreter

    def __init__(
        self,
        groups: GroupRepository,
        users: UserRepository,
        config: ScimConfig,
        mapper: Optional[SchemaMapper] = None,
    ):
        mapper = mapper or SchemaMapper()
        super().__init__(
            groups,
            config.groups,
            config,
            GroupSerializer(mapper, config.groups.schema, config.group_member_schema, groups),
            mapper,
        )
        self.membership = MembershipManager(users, groups, config.group_member_schema)

    async def _members_for_create(self, tenant: Company, payload: Dict[str, Any]) -> Optional[List[User]]:
        members = payload.get("members")
        if members is None:
            return None
        identifiers = member_identifiers(members, INVALID_POST_MEMBERS)
        return await self.membership.resolve(tenant, identifiers)

    async def _members_for_replace(self, tenant: Company, payload: Any) -> Optional[List[User]]:
        members = payload.get("members") if isinstance(payload, dict) else None
        identifiers = member_identifiers(members, INVALID_PUT_MEMBERS)
        return await self.membership.resolve(tenant, identifiers)

    async def _after_create(self, resource: Group, members: Optional[List[User]]) -> None:
        if members:
            await self.membership.add(resource, members)

    async def _after_replace(self, resource: Group, members: Optional[List[User]]) -> None:
        await self.membership.replace(resource, members or [])
