"""Пагинация SCIM: startIndex / count"""

from dataclasses import dataclass
from typing import Optional, Union

from ..utils.exceptions import ConfigurationError, InvalidPaginationError

# наибольшее значение OFFSET / LIMIT, которое принимает хранилище (BIGINT)
STORE_MAX_INT = 2 ** 63 - 1


@dataclass(frozen=True)
class PageWindow:
    """Окно выборки: 1-based startIndex SCIM и 0-based offset хранилища"""
    start_index: int
    offset: int
    limit: int


class PaginationCounter:
    """Вычисляет окно выборки из параметров startIndex и count"""

    def __init__(self, default_count: int = 100, max_count: Optional[int] = None):
        if default_count < 0 or (max_count is not None and max_count < 0):
            raise ConfigurationError("Page sizes must not be negative")
        self.default_count = default_count
        self.max_count = max_count

    def window(
        self,
        start_index: Optional[Union[int, str]] = None,
        count: Optional[Union[int, str]] = None
    ) -> PageWindow:
        """startIndex < 1 трактуется как 1, отрицательный count - как 0 (RFC 7644, 3.4.2.4)

        Оба значения ограничены сверху STORE_MAX_INT.
        """
        start = self._to_int("startIndex", start_index)
        start = 1 if start is None else min(max(start, 1), STORE_MAX_INT)

        limit = self._to_int("count", count)
        limit = self.default_count if limit is None else max(limit, 0)
        if self.max_count is not None:
            limit = min(limit, self.max_count)
        limit = min(limit, STORE_MAX_INT)

        return PageWindow(start_index=start, offset=start - 1, limit=limit)

    @staticmethod
    def _to_int(name: str, value: Optional[Union[int, str]]) -> Optional[int]:
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            raise InvalidPaginationError(f"'{name}' must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise InvalidPaginationError(f"'{name}' must be an integer, got {value!r}")
