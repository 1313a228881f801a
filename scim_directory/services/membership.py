"""Состав групп: проверка payload members, поиск пользователей и сверка"""

import logging
from typing import Any, List

from ..models.db import Company, Group, User
from ..models.filters import FilterExpression
from ..models.schema_map import SchemaNode, field_map
from ..repositories.base import GroupRepository, UserRepository
from ..utils.exceptions import ConfigurationError, InvalidMembersError, ResourceNotFoundError

logger = logging.getLogger(__name__)

INVALID_PUT_MEMBERS = (
    "Invalid PUT request. The 'members' attribute of the request must exist "
    "and be an array of objects with a 'value'."
)
INVALID_PATCH_MEMBERS = (
    "Invalid PATCH request. The 'value' of a members operation must be "
    "an array of objects with a 'value'."
)


def member_identifiers(members: Any, message: str) -> List[Any]:
    """Идентификаторы из списка [{"value": ...}, ...] без повторов, в исходном порядке"""
    if not isinstance(members, list):
        raise InvalidMembersError(message)
    if not all(isinstance(member, dict) and member.get("value") is not None for member in members):
        raise InvalidMembersError(message)

    identifiers: List[Any] = []
    for member in members:
        value = member["value"]
        if value not in identifiers:
            identifiers.append(value)
    return identifiers


class MembershipManager:
    """Изменение состава группы

    Идентификатор участника - поле пользователя, на которое в схеме участника
    указывает атрибут ``value``.
    """

    def __init__(self, users: UserRepository, groups: GroupRepository, member_schema: SchemaNode):
        self.users = users
        self.groups = groups
        self.member_attributes = field_map(member_schema)
        member_field = self.member_attributes.get("value")
        if member_field is None:
            raise ConfigurationError("Group member schema must map 'value' to a user field")
        self.member_field = member_field

    async def resolve(self, tenant: Company, identifiers: List[Any]) -> List[User]:
        """Пользователи арендатора по идентификаторам; неизвестный идентификатор - 404"""
        if not identifiers:
            return []

        found = await self.users.find_many(tenant, self.member_field, identifiers)
        by_key = {str(user.read_field(self.member_field)): user for user in found}

        users = []
        for identifier in identifiers:
            user = by_key.get(str(identifier))
            if user is None:
                raise ResourceNotFoundError(identifier)
            users.append(user)
        return users

    async def add(self, group: Group, users: List[User]) -> None:
        """Добавляет пользователей, которых еще нет в группе"""
        await self.groups.add_members(group, users)

    async def replace(self, group: Group, users: List[User]) -> None:
        """Заменяет состав группы переданными пользователями"""
        await self.groups.clear_members(group)
        await self.groups.add_members(group, users)

    async def clear(self, group: Group) -> None:
        """Удаляет всех участников группы"""
        await self.groups.clear_members(group)

    async def remove(self, group: Group, identifiers: List[Any]) -> None:
        """Удаляет названных участников; каждый должен состоять в группе"""
        current = await self.groups.members_of(group)
        by_key = {str(user.read_field(self.member_field)): user for user in current}

        targets = []
        for identifier in identifiers:
            user = by_key.get(str(identifier))
            if user is None:
                raise ResourceNotFoundError(identifier)
            targets.append(user)

        await self.groups.remove_members(group, targets)

    async def remove_matching(self, tenant: Company, group: Group, expression: FilterExpression) -> int:
        """Удаляет участников, подходящих под фильтр; отсутствие совпадений - не ошибка"""
        page = await self.users.query(tenant, expression)
        current_ids = {user.id for user in await self.groups.members_of(group)}
        targets = [user for user in page.items if user.id in current_ids]

        await self.groups.remove_members(group, targets)
        logger.info(f"Filter '{expression}' removed {len(targets)} members from group {group.uuid}")
        return len(targets)
