"""Отображение между атрибутами SCIM и полями хранилища"""

from typing import Any, Dict, Protocol

from ..models.schema_map import ArrayNode, Constant, FieldRef, ObjectNode, SchemaNode, schema_fields
from ..utils.exceptions import ConfigurationError

_MISSING = object()


class FieldReader(Protocol):
    """Ресурс, поля которого можно читать по имени"""

    def read_field(self, name: str) -> Any:
        ...


class SchemaMapper:
    """Двунаправленное отображение по дереву схемы

    Чтение (read) строит SCIM JSON той же формы, что и схема, подставляя
    значения полей ресурса. Запись (extract) делает обратное: собирает из
    SCIM payload значения по тем же путям, где в схеме стоят поля.
    """

    def read(self, node: SchemaNode, resource: FieldReader) -> Any:
        """Рендерит узел схемы для ресурса"""
        if isinstance(node, ObjectNode):
            return {key: self.read(child, resource) for key, child in node.children.items()}

        if isinstance(node, ArrayNode):
            return [self.read(item, resource) for item in node.items]

        if isinstance(node, FieldRef):
            return resource.read_field(node.name)

        if isinstance(node, Constant):
            return node.value

        raise ConfigurationError(f"Unknown schema node: {node!r}")

    def extract(self, node: SchemaNode, payload: Any, compact: bool = False) -> Dict[str, Any]:
        """Собирает значения полей из SCIM payload

        Отсутствующие в payload пути дают None (или пропускаются при compact=True).
        Если одно поле встречается в схеме несколько раз, берется первое найденное значение.
        """
        values: Dict[str, Any] = {}
        self._extract(node, payload, values)

        result: Dict[str, Any] = {}
        for name in dict.fromkeys(schema_fields(node)):
            value = values.get(name, _MISSING)
            if value is _MISSING or value is None:
                if compact:
                    continue
                value = None
            result[name] = value
        return result

    def _extract(self, node: SchemaNode, payload: Any, values: Dict[str, Any]) -> None:
        if isinstance(node, FieldRef):
            if payload is not _MISSING and payload is not None and values.get(node.name) is None:
                values[node.name] = payload
            return

        if isinstance(node, ObjectNode):
            for key, child in node.children.items():
                if isinstance(payload, dict):
                    self._extract(child, payload.get(key, _MISSING), values)
                else:
                    self._extract(child, _MISSING, values)
            return

        if isinstance(node, ArrayNode):
            for index, item in enumerate(node.items):
                if isinstance(payload, list) and index < len(payload):
                    self._extract(item, payload[index], values)
                else:
                    self._extract(item, _MISSING, values)

        # Constant - только для чтения
