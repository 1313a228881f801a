"""Конфигурация приложения"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type

from pydantic_settings import BaseSettings, SettingsConfigDict

from . import mappings
from .models.db import Base, Group, User
from .models.schema_map import FieldRef, ObjectNode, SchemaNode, compile_schema, schema_fields
from .utils.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Настройки приложения"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # База данных
    database_url: str = "sqlite+aiosqlite:///./scim_directory.db"
    database_echo: bool = False
    create_tables: bool = True

    # Сервер
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    scim_path_prefix: str = "/scim/v2"

    # Логирование
    log_level: str = "INFO"

    # Безопасность
    cors_origins: str = "*"

    # Пагинация
    default_page_size: int = 100
    max_page_size: Optional[int] = 1000

    # Порядок сортировки списков: "created_at:desc,id"
    scim_users_list_order: str = "id"
    scim_groups_list_order: str = "id"

    # Политика создания: True - 409 при совпадении естественного ключа, False - upsert
    scim_user_prevent_update_on_create: bool = False
    scim_group_prevent_update_on_create: bool = False

    # Постоянные атрибуты, которые записываются при создании пользователя
    custom_user_attributes: Dict[str, Any] = {}

    # True - все операции PATCH фиксируются одной транзакцией,
    # False - каждая операция фиксируется сразу после применения
    atomic_patch: bool = True


@dataclass(frozen=True)
class OrderBy:
    """Элемент сортировки"""
    column: str
    descending: bool = False


@dataclass(frozen=True)
class ResponseHooks:
    """Необязательные обработчики вокруг каждого SCIM ответа

    before_response получает параметры запроса, after_response - ресурс
    (или список ресурсов) и событие RETRIEVED / CREATED / UPDATED / DELETED.
    """
    before_response: Optional[Callable[[Dict[str, Any]], None]] = None
    after_response: Optional[Callable[[Any, str], None]] = None


@dataclass(frozen=True)
class ResourceConfig:
    """Настройки одного типа ресурса (User или Group)"""
    name: str
    schema: SchemaNode
    mutable_schema: SchemaNode
    queryable_attributes: Mapping[str, str]
    required_attributes: Tuple[str, ...]
    natural_key: str
    natural_key_ignore_case: bool = False
    unique_natural_key: bool = False
    lookup_field: str = "uuid"
    list_order: Tuple[OrderBy, ...] = (OrderBy("id"),)
    prevent_update_on_create: bool = False
    custom_attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScimConfig:
    """Конфигурация SCIM ядра: создается один раз при старте и больше не меняется"""
    users: ResourceConfig
    groups: ResourceConfig
    group_member_schema: SchemaNode
    service_provider_config: Mapping[str, Any]
    default_page_size: int = 100
    max_page_size: Optional[int] = None
    atomic_patch: bool = True
    hooks: ResponseHooks = field(default_factory=ResponseHooks)


def parse_list_order(value: str) -> Tuple[OrderBy, ...]:
    """Разбирает строку сортировки вида "created_at:desc,id" """
    order = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        column, _, direction = part.partition(":")
        direction = direction.strip().lower() or "asc"
        if direction not in ("asc", "desc"):
            raise ConfigurationError(f"Invalid sort direction '{direction}' in list order '{value}'")
        order.append(OrderBy(column=column.strip(), descending=direction == "desc"))

    if not order:
        raise ConfigurationError("List order must name at least one column")
    return tuple(order)


def _check_fields(model: Type[Base], names, columns_only: bool, source: str) -> None:
    columns = set(model.__table__.columns.keys())
    for name in names:
        if name in columns:
            continue
        if not columns_only and hasattr(model, name):
            continue
        raise ConfigurationError(f"{source} references unknown {model.__name__} field '{name}'")


def _check_resource(model: Type[Base], resource: ResourceConfig) -> None:
    _check_fields(model, schema_fields(resource.schema), False, f"{resource.name} schema")
    _check_fields(model, schema_fields(resource.mutable_schema), True, f"{resource.name} mutable schema")
    _check_fields(model, resource.queryable_attributes.values(), True, f"{resource.name} queryable attributes")
    _check_fields(model, [order.column for order in resource.list_order], True, f"{resource.name} list order")
    _check_fields(model, [resource.natural_key, resource.lookup_field], True, f"{resource.name} keys")
    _check_fields(model, resource.custom_attributes.keys(), True, f"{resource.name} custom attributes")


def build_scim_config(settings: Settings, hooks: Optional[ResponseHooks] = None) -> ScimConfig:
    """Собирает конфигурацию SCIM из настроек и схем по умолчанию"""
    user_mutable = compile_schema(mappings.USER_MUTABLE_SCHEMA)
    group_mutable = compile_schema(mappings.GROUP_MUTABLE_SCHEMA)

    users = ResourceConfig(
        name="User",
        schema=compile_schema(mappings.USER_SCHEMA),
        mutable_schema=user_mutable,
        queryable_attributes=dict(mappings.USER_QUERYABLE_ATTRIBUTES),
        required_attributes=tuple(dict.fromkeys(schema_fields(user_mutable))),
        natural_key="email",
        natural_key_ignore_case=True,
        unique_natural_key=True,
        lookup_field="uuid",
        list_order=parse_list_order(settings.scim_users_list_order),
        prevent_update_on_create=settings.scim_user_prevent_update_on_create,
        custom_attributes=dict(settings.custom_user_attributes),
    )
    groups = ResourceConfig(
        name="Group",
        schema=compile_schema(mappings.GROUP_SCHEMA),
        mutable_schema=group_mutable,
        queryable_attributes=dict(mappings.GROUP_QUERYABLE_ATTRIBUTES),
        required_attributes=tuple(dict.fromkeys(schema_fields(group_mutable))),
        natural_key="display_name",
        lookup_field="uuid",
        list_order=parse_list_order(settings.scim_groups_list_order),
        prevent_update_on_create=settings.scim_group_prevent_update_on_create,
    )
    member_schema = compile_schema(mappings.GROUP_MEMBER_SCHEMA)

    _check_resource(User, users)
    _check_resource(Group, groups)
    _check_fields(User, schema_fields(member_schema), True, "Group member schema")
    if not isinstance(member_schema, ObjectNode) or not isinstance(member_schema.children.get("value"), FieldRef):
        raise ConfigurationError("Group member schema must map 'value' to a user field")

    return ScimConfig(
        users=users,
        groups=groups,
        group_member_schema=member_schema,
        service_provider_config=dict(mappings.SERVICE_PROVIDER_CONFIG),
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
        atomic_patch=settings.atomic_patch,
        hooks=hooks or ResponseHooks(),
    )


@lru_cache
def get_settings() -> Settings:
    """Настройки процесса (читаются один раз)"""
    return Settings()
