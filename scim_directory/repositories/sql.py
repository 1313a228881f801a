"""Реализация хранилища каталога на SQLAlchemy (async)"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, delete, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import OrderBy, ResourceConfig
from ..models.db import Company, Group, GroupMembership, User
from ..models.filters import FilterExpression, FilterOperator
from ..utils.exceptions import ConfigurationError, ResourceNotFoundError
from .base import Page

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", User, Group)

# Все значения фильтра передаются как связанные параметры, не через текст запроса
_OPERATORS: Dict[FilterOperator, Callable[[Any, Any], Any]] = {
    FilterOperator.EQ: lambda column, value: column == value,
    FilterOperator.NE: lambda column, value: column != value,
    FilterOperator.CO: lambda column, value: column.contains(str(value), autoescape=True),
    FilterOperator.SW: lambda column, value: column.startswith(str(value), autoescape=True),
    FilterOperator.EW: lambda column, value: column.endswith(str(value), autoescape=True),
    FilterOperator.GT: lambda column, value: column > value,
    FilterOperator.GE: lambda column, value: column >= value,
    FilterOperator.LT: lambda column, value: column < value,
    FilterOperator.LE: lambda column, value: column <= value,
}


def _coerce(column_type: Any, value: Any) -> Tuple[bool, Any]:
    """Приводит значение к типу колонки; (False, None) - значение не может совпасть"""
    try:
        python_type = column_type.python_type
    except NotImplementedError:
        return True, value

    if python_type is bool:
        if isinstance(value, bool):
            return True, value
        text = str(value).strip().lower()
        if text in ("true", "1"):
            return True, True
        if text in ("false", "0"):
            return True, False
        return False, None

    if python_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return True, value
        try:
            return True, int(str(value).strip())
        except ValueError:
            return False, None

    if python_type is str:
        return True, str(value)

    return True, value


class SqlResourceRepository(Generic[ModelT]):
    """Общие операции над ресурсами одного типа в рамках арендатора"""

    model: Type[ModelT]

    def __init__(self, session: AsyncSession, resource: ResourceConfig):
        self._session = session
        self._resource = resource

    def _attribute(self, name: str) -> Any:
        if name not in self.model.__table__.columns:
            raise ConfigurationError(f"{self.model.__name__} has no column '{name}'")
        return getattr(self.model, name)

    def _column_type(self, name: str) -> Any:
        return self.model.__table__.columns[name].type

    def _scoped(self, tenant: Company) -> Select:
        return select(self.model).where(self.model.company_id == tenant.id)

    def _predicate(self, expression: FilterExpression) -> Any:
        column = self._attribute(expression.resource_attribute)
        matchable, value = _coerce(self._column_type(expression.resource_attribute), expression.literal)
        if not matchable:
            return false()
        return _OPERATORS[expression.operator](column, value)

    def _order_by(self, order: Sequence[OrderBy]) -> List[Any]:
        clauses = []
        columns = set()
        for item in order:
            column = self._attribute(item.column)
            clauses.append(column.desc() if item.descending else column.asc())
            columns.add(item.column)
        # первичный ключ как последний критерий, чтобы порядок страниц был стабильным
        if "id" not in columns:
            clauses.append(self.model.id.asc())
        return clauses

    async def get(self, tenant: Company, identifier: Any, for_update: bool = False) -> ModelT:
        resource = await self.find_by(tenant, self._resource.lookup_field, identifier, for_update=for_update)
        if resource is None:
            raise ResourceNotFoundError(identifier)
        return resource

    async def find_by(
        self,
        tenant: Company,
        field_name: str,
        value: Any,
        ignore_case: bool = False,
        for_update: bool = False
    ) -> Optional[ModelT]:
        column = self._attribute(field_name)
        matchable, value = _coerce(self._column_type(field_name), value)
        if not matchable:
            return None

        stmt = self._scoped(tenant)
        if ignore_case and isinstance(value, str):
            stmt = stmt.where(func.lower(column) == value.lower())
        else:
            stmt = stmt.where(column == value)
        stmt = stmt.order_by(self.model.id.asc()).limit(1)
        if for_update:
            stmt = stmt.with_for_update()

        return await self._session.scalar(stmt)

    async def find_many(self, tenant: Company, field_name: str, values: Iterable[Any]) -> List[ModelT]:
        column = self._attribute(field_name)
        column_type = self._column_type(field_name)
        coerced = []
        for value in values:
            matchable, value = _coerce(column_type, value)
            if matchable:
                coerced.append(value)
        if not coerced:
            return []

        result = await self._session.scalars(
            self._scoped(tenant).where(column.in_(coerced)).order_by(self.model.id.asc())
        )
        return list(result.all())

    async def query(
        self,
        tenant: Company,
        expression: Optional[FilterExpression] = None,
        order: Sequence[OrderBy] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Page[ModelT]:
        stmt = self._scoped(tenant)
        if expression is not None:
            stmt = stmt.where(self._predicate(expression))

        total = await self._session.scalar(select(func.count()).select_from(stmt.subquery()))

        page_stmt = stmt.order_by(*self._order_by(order)).offset(offset)
        if limit is not None:
            page_stmt = page_stmt.limit(limit)
        items = list((await self._session.scalars(page_stmt)).all())

        logger.debug(f"{self.model.__name__} query '{expression}' matched {total}, returned {len(items)}")
        return Page(items=items, total=total or 0)

    async def create(self, tenant: Company, attributes: Dict[str, Any]) -> ModelT:
        resource = self.model(company_id=tenant.id, **attributes)
        self._session.add(resource)
        await self._session.flush()
        await self._session.refresh(resource)
        logger.info(f"Created {self.model.__name__} {resource.uuid} for company {tenant.id}")
        return resource

    async def update(self, resource: ModelT, attributes: Dict[str, Any]) -> ModelT:
        for name, value in attributes.items():
            self._attribute(name)
            setattr(resource, name, value)
        await self._session.flush()
        await self._session.refresh(resource)
        return resource

    async def delete(self, resource: ModelT) -> None:
        await self._delete_memberships(resource)
        await self._session.delete(resource)
        await self._session.flush()
        logger.info(f"Deleted {self.model.__name__} {resource.uuid}")

    async def _delete_memberships(self, resource: ModelT) -> None:
        raise NotImplementedError

    async def deprovision(self, resource: ModelT) -> None:
        if resource.archived_at is None:
            resource.archived_at = datetime.now(timezone.utc)
            await self._session.flush()
            await self._session.refresh(resource)

    async def reprovision(self, resource: ModelT) -> None:
        if resource.archived_at is not None:
            resource.archived_at = None
            await self._session.flush()
            await self._session.refresh(resource)

    async def commit(self) -> None:
        await self._session.commit()


class SqlUserRepository(SqlResourceRepository[User]):
    """Пользователи"""

    model = User

    async def _delete_memberships(self, resource: User) -> None:
        await self._session.execute(delete(GroupMembership).where(GroupMembership.user_id == resource.id))


class SqlGroupRepository(SqlResourceRepository[Group]):
    """Группы и их состав"""

    model = Group

    async def _delete_memberships(self, resource: Group) -> None:
        await self.clear_members(resource)

    async def members_of(self, group: Group) -> List[User]:
        result = await self._session.scalars(
            select(User)
            .join(GroupMembership, GroupMembership.user_id == User.id)
            .where(GroupMembership.group_id == group.id)
            .order_by(GroupMembership.id.asc())
        )
        return list(result.all())

    async def add_members(self, group: Group, users: Iterable[User]) -> None:
        result = await self._session.scalars(
            select(GroupMembership.user_id).where(GroupMembership.group_id == group.id)
        )
        present = set(result.all())

        added = 0
        for user in users:
            if user.id in present:
                continue
            self._session.add(GroupMembership(group_id=group.id, user_id=user.id))
            present.add(user.id)
            added += 1

        if added:
            await self._session.flush()
            logger.info(f"Added {added} members to group {group.uuid}")

    async def remove_members(self, group: Group, users: Iterable[User]) -> None:
        user_ids = [user.id for user in users]
        if not user_ids:
            return
        await self._session.execute(
            delete(GroupMembership).where(
                GroupMembership.group_id == group.id,
                GroupMembership.user_id.in_(user_ids),
            )
        )
        logger.info(f"Removed {len(user_ids)} members from group {group.uuid}")

    async def clear_members(self, group: Group) -> None:
        await self._session.execute(delete(GroupMembership).where(GroupMembership.group_id == group.id))


class SqlCompanyRepository:
    """Арендаторы"""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def authenticate(self, subdomain: str, api_token: str) -> Optional[Company]:
        company = await self._session.scalar(select(Company).where(Company.subdomain == subdomain))
        if company is None:
            return None
        if not secrets.compare_digest(company.api_token.encode(), api_token.encode()):
            return None
        return company
