"""ORM модели хранилища каталога (SQLAlchemy 2.0)"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..utils.exceptions import ConfigurationError


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _generate_uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Базовый класс ORM моделей"""


class TimestampMixin:
    """Колонки created_at / updated_at"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,
        onupdate=_utc_now,
        nullable=False,
    )


class ScimResourceMixin:
    """Общее для ресурсов SCIM: чтение поля по имени и статус архивации"""

    archived_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def active(self) -> bool:
        return self.archived_at is None

    def read_field(self, name: str) -> Any:
        """Значение поля для схемы SCIM"""
        try:
            return getattr(self, name)
        except AttributeError:
            raise ConfigurationError(
                f"{type(self).__name__} has no field '{name}' referenced by the SCIM schema"
            )


class Company(Base, TimestampMixin):
    """Арендатор - граница авторизации"""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    api_token: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, subdomain={self.subdomain})>"


class User(Base, TimestampMixin, ScimResourceMixin):
    """Пользователь каталога"""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, default=_generate_uuid)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    alternate_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, uuid={self.uuid}, email={self.email})>"


class Group(Base, TimestampMixin, ScimResourceMixin):
    """Группа каталога"""

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, default=_generate_uuid)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    display_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, uuid={self.uuid}, display_name={self.display_name})>"


class GroupMembership(Base):
    """Связь группа - пользователь (порядок вставки сохраняется через id)"""

    __tablename__ = "groups_users"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_groups_users_group_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,
        nullable=False,
    )
