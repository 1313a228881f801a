"""Рендеринг ресурсов хранилища в SCIM JSON"""

from typing import Any, Dict, List, Optional

from ..models.schema_map import SchemaNode
from ..models.scim import ListResponse
from ..repositories.base import GroupRepository, Page
from .pagination import PageWindow
from .schema_mapper import FieldReader, SchemaMapper


class ResourceSerializer:
    """Рендерит ресурс по схеме и оборачивает списки в ListResponse"""

    def __init__(self, mapper: SchemaMapper, schema: SchemaNode):
        self.mapper = mapper
        self.schema = schema

    async def render(self, resource: FieldReader) -> Dict[str, Any]:
        return self.mapper.read(self.schema, resource)

    async def render_list(self, page: Page, window: PageWindow) -> Dict[str, Any]:
        """ListResponse: totalResults - все совпадения, itemsPerPage - запрошенный limit"""
        resources: List[Dict[str, Any]] = [await self.render(item) for item in page.items]
        return ListResponse(
            totalResults=page.total,
            startIndex=window.start_index,
            itemsPerPage=window.limit,
            Resources=resources,
        ).model_dump()


class GroupSerializer(ResourceSerializer):
    """Группа рендерится в два прохода: атрибуты, затем участники по схеме участника"""

    def __init__(
        self,
        mapper: SchemaMapper,
        schema: SchemaNode,
        member_schema: SchemaNode,
        groups: GroupRepository,
        members_key: str = "members"
    ):
        super().__init__(mapper, schema)
        self.member_schema = member_schema
        self.groups = groups
        self.members_key = members_key

    async def render(self, resource: FieldReader) -> Dict[str, Any]:
        rendered = await super().render(resource)

        members: Optional[List[Any]] = rendered.get(self.members_key)
        if not isinstance(members, list):
            members = []
            rendered[self.members_key] = members

        # порядок участников - как вернуло хранилище
        for member in await self.groups.members_of(resource):
            members.append(self.mapper.read(self.member_schema, member))

        return rendered
