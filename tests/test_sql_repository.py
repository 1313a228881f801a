"""Тесты SQL хранилища"""

import pytest
from sqlalchemy import Boolean, Integer, String

from scim_directory.models.filters import FilterExpression, FilterOperator
from scim_directory.repositories.sql import SqlGroupRepository, SqlUserRepository, _coerce
from scim_directory.utils.exceptions import ResourceNotFoundError

from .factories import create_company, create_group, create_user


@pytest.mark.parametrize("column_type,value,expected", [
    (Integer(), "42", (True, 42)),
    (Integer(), "abc", (False, None)),
    (Boolean(), "TRUE", (True, True)),
    (Boolean(), "0", (True, False)),
    (Boolean(), "maybe", (False, None)),
    (String(), 7, (True, "7")),
])
def test_coerce(column_type, value, expected):
    assert _coerce(column_type, value) == expected


@pytest.fixture
async def users(session_factory, scim_config):
    async with session_factory() as session:
        yield SqlUserRepository(session, scim_config.users)


async def test_query_counts_full_set_and_pages(users, session_factory, company):
    for name in ("Carol", "Alice", "Bob"):
        await create_user(session_factory, company, email=f"{name.lower()}@example.com", first_name=name)

    expression = FilterExpression(resource_attribute="email", operator=FilterOperator.EW, literal="@example.com")
    page = await users.query(company, expression, offset=1, limit=1)

    assert page.total == 3
    assert [user.first_name for user in page.items] == ["Alice"]


async def test_find_by_ignoring_case(users, session_factory, company):
    created = await create_user(session_factory, company, email="Jane@Example.com")

    found = await users.find_by(company, "email", "jane@example.COM", ignore_case=True)

    assert found.id == created.id
    assert await users.find_by(company, "email", "jane@example.COM") is None


async def test_get_is_tenant_scoped(users, session_factory, company):
    other = await create_company(session_factory, "other", "other-token")
    stranger = await create_user(session_factory, other)

    with pytest.raises(ResourceNotFoundError):
        await users.get(company, stranger.uuid)


async def test_deprovision_and_reprovision(users, session_factory, company):
    created = await create_user(session_factory, company)
    user = await users.get(company, created.uuid)

    await users.deprovision(user)
    assert user.active is False

    await users.reprovision(user)
    assert user.active is True


async def test_membership_edits(session_factory, scim_config, company):
    u1 = await create_user(session_factory, company, email="u1@example.com")
    u2 = await create_user(session_factory, company, email="u2@example.com")
    created = await create_group(session_factory, company)

    async with session_factory() as session:
        groups = SqlGroupRepository(session, scim_config.groups)
        group = await groups.get(company, created.uuid)

        await groups.add_members(group, [u2, u1, u2])
        assert [user.id for user in await groups.members_of(group)] == [u2.id, u1.id]

        await groups.remove_members(group, [u2])
        assert [user.id for user in await groups.members_of(group)] == [u1.id]

        await groups.clear_members(group)
        assert await groups.members_of(group) == []
