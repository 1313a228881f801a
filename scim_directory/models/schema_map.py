"""Дерево схемы SCIM: соответствие атрибутов SCIM полям хранилища

Каждый узел дерева - один из вариантов:

* ``Constant`` - значение, которое передается в ответ как есть (например ``schemas``);
* ``FieldRef`` - имя поля ресурса, значение которого подставляется при чтении;
* ``ObjectNode`` - вложенный объект SCIM (ключ -> узел);
* ``ArrayNode`` - массив SCIM, каждый элемент которого - отдельный узел.

Схемы описываются обычными ``dict``/``list`` и приводятся к дереву
функцией ``compile_schema``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple, Union


@dataclass(frozen=True)
class Constant:
    """Постоянное значение"""
    value: Any


@dataclass(frozen=True)
class FieldRef:
    """Ссылка на поле ресурса"""
    name: str


@dataclass(frozen=True)
class ObjectNode:
    """Вложенный объект"""
    children: Mapping[str, "SchemaNode"]


@dataclass(frozen=True)
class ArrayNode:
    """Массив"""
    items: Tuple["SchemaNode", ...]


SchemaNode = Union[Constant, FieldRef, ObjectNode, ArrayNode]


def compile_schema(definition: Any) -> SchemaNode:
    """Приводит описание схемы из dict/list/FieldRef к дереву узлов"""
    if isinstance(definition, (Constant, FieldRef, ObjectNode, ArrayNode)):
        return definition

    if isinstance(definition, dict):
        children: Dict[str, SchemaNode] = {
            str(key): compile_schema(value) for key, value in definition.items()
        }
        return ObjectNode(children=children)

    if isinstance(definition, (list, tuple)):
        return ArrayNode(items=tuple(compile_schema(item) for item in definition))

    return Constant(value=definition)


def schema_fields(node: SchemaNode) -> List[str]:
    """Имена всех полей, на которые ссылается дерево (в порядке обхода)"""
    if isinstance(node, FieldRef):
        return [node.name]
    if isinstance(node, ObjectNode):
        return [name for child in node.children.values() for name in schema_fields(child)]
    if isinstance(node, ArrayNode):
        return [name for item in node.items for name in schema_fields(item)]
    return []


def field_map(node: SchemaNode) -> Dict[str, str]:
    """Плоское соответствие ключ SCIM -> поле для узлов первого уровня объекта"""
    if not isinstance(node, ObjectNode):
        return {}
    return {
        key: child.name
        for key, child in node.children.items()
        if isinstance(child, FieldRef)
    }
