"""Модели для SCIM фильтров"""

from pydantic import BaseModel, ConfigDict
from enum import Enum


class FilterOperator(str, Enum):
    """Операторы сравнения SCIM"""
    EQ = "eq"  # равно
    NE = "ne"  # не равно
    CO = "co"  # содержит
    SW = "sw"  # начинается с
    EW = "ew"  # заканчивается на
    GT = "gt"  # больше
    GE = "ge"  # больше или равно
    LT = "lt"  # меньше
    LE = "le"  # меньше или равно


class FilterExpression(BaseModel):
    """Однокомпонентное выражение фильтра: column operator literal

    resource_attribute - уже имя колонки хранилища, а не SCIM атрибута.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    resource_attribute: str
    operator: FilterOperator
    literal: str

    def __str__(self):
        return f"{self.resource_attribute} {self.operator.value} {self.literal!r}"
