"""Интерфейсы хранилища ресурсов каталога

Каждый метод ограничен одним арендатором (Company). Ресурс другого
арендатора для ядра неотличим от отсутствующего.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, Optional, Protocol, Sequence, TypeVar, runtime_checkable

from ..config import OrderBy
from ..models.db import Company, Group, User
from ..models.filters import FilterExpression

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """Страница выборки и общее количество совпадений"""
    items: List[T] = field(default_factory=list)
    total: int = 0


@runtime_checkable
class ResourceRepository(Protocol):
    """Общие операции хранилища для пользователей и групп"""

    async def get(self, tenant: Company, identifier: Any, for_update: bool = False) -> Any:
        """Ресурс по идентификатору

        Raises:
            ResourceNotFoundError: ресурса нет или он принадлежит другому арендатору
        """
        ...

    async def find_by(
        self,
        tenant: Company,
        field_name: str,
        value: Any,
        ignore_case: bool = False,
        for_update: bool = False
    ) -> Optional[Any]:
        """Первый ресурс арендатора с указанным значением поля или None"""
        ...

    async def query(
        self,
        tenant: Company,
        expression: Optional[FilterExpression] = None,
        order: Sequence[OrderBy] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Page:
        """Отфильтрованная, упорядоченная и ограниченная выборка с общим количеством"""
        ...

    async def create(self, tenant: Company, attributes: Dict[str, Any]) -> Any:
        ...

    async def update(self, resource: Any, attributes: Dict[str, Any]) -> Any:
        ...

    async def delete(self, resource: Any) -> None:
        ...

    async def deprovision(self, resource: Any) -> None:
        ...

    async def reprovision(self, resource: Any) -> None:
        ...

    async def commit(self) -> None:
        ...


@runtime_checkable
class UserRepository(ResourceRepository, Protocol):
    """Хранилище пользователей"""

    async def find_many(self, tenant: Company, field_name: str, values: Iterable[Any]) -> List[User]:
        """Пользователи арендатора, у которых поле field_name входит в values"""
        ...


@runtime_checkable
class GroupRepository(ResourceRepository, Protocol):
    """Хранилище групп и их состава"""

    async def members_of(self, group: Group) -> List[User]:
        """Участники группы в порядке добавления"""
        ...

    async def add_members(self, group: Group, users: Iterable[User]) -> None:
        """Добавляет пользователей, которых еще нет в группе"""
        ...

    async def remove_members(self, group: Group, users: Iterable[User]) -> None:
        ...

    async def clear_members(self, group: Group) -> None:
        ...


@runtime_checkable
class CompanyRepository(Protocol):
    """Арендаторы"""

    async def authenticate(self, subdomain: str, api_token: str) -> Optional[Company]:
        ...
