"""Хранилище ресурсов каталога"""

from .base import Page, ResourceRepository, UserRepository, GroupRepository, CompanyRepository
from .sql import SqlUserRepository, SqlGroupRepository, SqlCompanyRepository

__all__ = [
    "Page",
    "ResourceRepository",
    "UserRepository",
    "GroupRepository",
    "CompanyRepository",
    "SqlUserRepository",
    "SqlGroupRepository",
    "SqlCompanyRepository",
]
