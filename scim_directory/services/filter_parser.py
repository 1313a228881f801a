"""Парсер однокомпонентных SCIM фильтров: attribute operator value"""

import re
from typing import Mapping

from ..models.filters import FilterExpression, FilterOperator
from ..utils.exceptions import InvalidFilterError, UnsupportedFilterAttributeError


class FilterParser:
    """Парсер SCIM фильтров вида ``userName eq "john@example.com"``

    Значение - весь остаток строки после оператора (пробелы внутри сохраняются).
    Атрибут SCIM переводится в колонку хранилища через queryable_attributes;
    незнакомый атрибут - ошибка клиента, а не пустой результат.
    """

    # атрибут, оператор и остаток строки как значение
    FILTER_PATTERN = re.compile(r"^\s*(?P<attribute>\S+)\s+(?P<operator>\S+)\s+(?P<literal>.*?)\s*$", re.DOTALL)

    def __init__(self, queryable_attributes: Mapping[str, str]):
        self.queryable_attributes = queryable_attributes

    def parse(self, filter_string: str) -> FilterExpression:
        """Парсит строку фильтра в структурированный запрос"""
        if not filter_string or not filter_string.strip():
            raise InvalidFilterError("Empty filter string")

        match = self.FILTER_PATTERN.match(filter_string)
        if not match or not match.group("literal"):
            raise InvalidFilterError(
                f"Invalid filter '{filter_string}'. Expected 'attribute operator value'"
            )

        attribute = match.group("attribute")
        column = self.queryable_attributes.get(attribute)
        if column is None:
            raise UnsupportedFilterAttributeError(attribute)

        operator_token = match.group("operator")
        try:
            operator = FilterOperator(operator_token.lower())
        except ValueError:
            raise InvalidFilterError(f"Unsupported filter operator: {operator_token}")

        return FilterExpression(
            resource_attribute=column,
            operator=operator,
            literal=self._parse_literal(match.group("literal")),
        )

    def _parse_literal(self, literal: str) -> str:
        """Убирает кавычки вокруг строкового значения"""
        if len(literal) >= 2 and literal.startswith('"') and literal.endswith('"'):
            # Убираем кавычки и обрабатываем escape-последовательности
            return literal[1:-1].replace('\\"', '"').replace('\\\\', '\\')
        return literal
