"""Кастомные исключения для SCIM Directory Service"""

from typing import Any


class SCIMDirectoryError(Exception):
    """Базовое исключение для SCIM Directory Service"""

    def __init__(self, message: str, status_code: int = 500, scim_type: str | None = None):
        self.message = message
        self.status_code = status_code
        self.scim_type = scim_type
        super().__init__(message)


class InvalidCredentialsError(SCIMDirectoryError):
    """Неверные учетные данные арендатора"""

    def __init__(self, message: str = "Authorization failure. The authorization header is invalid or missing."):
        super().__init__(
            message=message,
            status_code=401
        )


class ResourceNotFoundError(SCIMDirectoryError):
    """Ресурс не найден (или принадлежит другому арендатору)"""

    def __init__(self, resource_id: Any):
        self.resource_id = resource_id
        super().__init__(
            message=f"Resource {resource_id} not found",
            status_code=404
        )


class InvalidAttributesError(SCIMDirectoryError):
    """Отсутствуют обязательные атрибуты при создании или замене"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=422,
            scim_type="invalidValue"
        )


class ResourceConflictError(SCIMDirectoryError):
    """Ресурс с таким естественным ключом уже существует"""

    def __init__(self, message: str = "Record already exists"):
        super().__init__(
            message=message,
            status_code=409,
            scim_type="uniqueness"
        )


class InvalidMembersError(SCIMDirectoryError):
    """Некорректная структура списка members"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=400,
            scim_type="invalidValue"
        )


class InvalidActiveParamError(SCIMDirectoryError):
    """Некорректное значение active"""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid 'active' value: {value!r}. Expected true, false, \"true\", \"false\", 1 or 0.",
            status_code=400,
            scim_type="invalidValue"
        )


class InvalidPatchValueError(SCIMDirectoryError):
    """Значение PATCH операции имеет неверный тип"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=400,
            scim_type="invalidValue"
        )


class InvalidPaginationError(SCIMDirectoryError):
    """Некорректные параметры пагинации"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=400,
            scim_type="invalidValue"
        )


class InvalidFilterError(SCIMDirectoryError):
    """Ошибка при парсинге или валидации фильтра"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=400,
            scim_type="invalidFilter"
        )


class UnsupportedFilterAttributeError(InvalidFilterError):
    """Атрибут фильтра не входит в список доступных для запроса"""

    def __init__(self, attribute: str):
        self.attribute = attribute
        super().__init__(f"Unsupported filter attribute: {attribute}")


class UnsupportedPatchRequestError(SCIMDirectoryError):
    """Неподдерживаемая PATCH операция"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=422,
            scim_type="invalidSyntax"
        )


class BadPatchPathError(SCIMDirectoryError):
    """Некорректный path в PATCH операции"""

    def __init__(self, path: str | None):
        self.path = path
        super().__init__(
            message=f"Invalid PATCH request. Unsupported path: {path!r}",
            status_code=422,
            scim_type="invalidPath"
        )


class InvalidPatchFilterError(SCIMDirectoryError):
    """Ошибка фильтра внутри квадратных скобок path"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=422,
            scim_type="invalidFilter"
        )


class ConfigurationError(SCIMDirectoryError):
    """Ошибка конфигурации"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=500,
            scim_type="configuration"
        )
