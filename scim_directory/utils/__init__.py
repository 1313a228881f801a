"""Утилиты для SCIM Directory Service"""

from .exceptions import (
    SCIMDirectoryError,
    InvalidCredentialsError,
    ResourceNotFoundError,
    InvalidAttributesError,
    ResourceConflictError,
    InvalidMembersError,
    InvalidActiveParamError,
    InvalidPatchValueError,
    InvalidPaginationError,
    InvalidFilterError,
    UnsupportedFilterAttributeError,
    UnsupportedPatchRequestError,
    BadPatchPathError,
    InvalidPatchFilterError,
    ConfigurationError,
)
from .responses import SCIMResponse

__all__ = [
    "SCIMDirectoryError",
    "InvalidCredentialsError",
    "ResourceNotFoundError",
    "InvalidAttributesError",
    "ResourceConflictError",
    "InvalidMembersError",
    "InvalidActiveParamError",
    "InvalidPatchValueError",
    "InvalidPaginationError",
    "InvalidFilterError",
    "UnsupportedFilterAttributeError",
    "UnsupportedPatchRequestError",
    "BadPatchPathError",
    "InvalidPatchFilterError",
    "ConfigurationError",
    "SCIMResponse",
]
