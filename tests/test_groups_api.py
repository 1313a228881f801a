"""Тесты SCIM эндпоинтов /Groups и операций над составом"""

from sqlalchemy import select

from scim_directory.config import build_scim_config
from scim_directory.models.db import Group, GroupMembership, User

from .factories import create_company, create_group, create_user

GROUPS = "/scim/v2/Groups"


def patch_body(*operations):
    return {
        "schemas": ["urn:ietf:params:scim:api:messages:2.0:PatchOp"],
        "Operations": list(operations),
    }


def group_payload(members=None, **overrides):
    payload = {
        "schemas": ["urn:ietf:params:scim:schemas:core:2.0:Group"],
        "displayName": "Engineering",
        "email": "engineering@example.com",
    }
    if members is not None:
        payload["members"] = [{"value": user.uuid} for user in members]
    payload.update(overrides)
    return payload


async def member_uuids(session_factory, group):
    async with session_factory() as session:
        result = await session.scalars(
            select(User.uuid)
            .join(GroupMembership, GroupMembership.user_id == User.id)
            .where(GroupMembership.group_id == group.id)
            .order_by(GroupMembership.id)
        )
        return list(result.all())


async def load_group(session_factory, uuid):
    async with session_factory() as session:
        return await session.scalar(select(Group).where(Group.uuid == uuid))


async def three_users(session_factory, company):
    return [
        await create_user(session_factory, company, email=f"u{index}@example.com", first_name=f"U{index}")
        for index in (1, 2, 3)
    ]


class TestListAndShowGroups:
    async def test_list_renders_members(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u2, u1])

        body = (await client.get(GROUPS)).json()

        assert body["totalResults"] == 1
        rendered = body["Resources"][0]
        assert rendered["id"] == group.uuid
        assert rendered["displayName"] == "Test Group"
        assert rendered["members"] == [{"value": u2.uuid}, {"value": u1.uuid}]
        assert rendered["meta"] == {"resourceType": "Group"}

    async def test_filter_by_display_name(self, client, session_factory, company):
        await create_group(session_factory, company, display_name="Sales")
        await create_group(session_factory, company, display_name="Support")

        body = (await client.get(GROUPS, params={"filter": 'displayName sw "Su"'})).json()

        assert [group["displayName"] for group in body["Resources"]] == ["Support"]

    async def test_user_attribute_is_not_queryable_on_groups(self, client):
        response = await client.get(GROUPS, params={"filter": 'userName eq "x"'})

        assert response.status_code == 400

    async def test_show_group_of_other_tenant(self, client, session_factory):
        other = await create_company(session_factory, "other", "other-token")
        group = await create_group(session_factory, other)

        assert (await client.get(f"{GROUPS}/{group.uuid}")).status_code == 404


class TestCreateGroup:
    async def test_create_with_members(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)

        response = await client.post(GROUPS, json=group_payload(members=[u1, u2, u1]))

        assert response.status_code == 201
        body = response.json()
        assert body["displayName"] == "Engineering"
        assert body["members"] == [{"value": u1.uuid}, {"value": u2.uuid}]

    async def test_create_with_unknown_member(self, client, session_factory):
        response = await client.post(GROUPS, json=group_payload() | {"members": [{"value": "ghost"}]})

        assert response.status_code == 404
        async with session_factory() as session:
            assert await session.scalar(select(Group)) is None

    async def test_create_with_malformed_members(self, client):
        response = await client.post(GROUPS, json=group_payload() | {"members": "u1"})

        assert response.status_code == 400

    async def test_missing_display_name(self, client):
        payload = group_payload()
        del payload["displayName"]

        response = await client.post(GROUPS, json=payload)

        assert response.status_code == 422

    async def test_duplicate_display_name_upserts(self, client, session_factory, company):
        existing = await create_group(session_factory, company, display_name="Engineering", email="old@example.com")

        response = await client.post(GROUPS, json=group_payload())

        assert response.status_code == 201
        assert response.json()["id"] == existing.uuid
        assert (await load_group(session_factory, existing.uuid)).email == "engineering@example.com"
        async with session_factory() as session:
            assert len((await session.scalars(select(Group))).all()) == 1

    async def test_duplicate_display_name_conflicts_when_prevented(
        self, make_client, settings, session_factory, company
    ):
        settings.scim_group_prevent_update_on_create = True
        existing = await create_group(session_factory, company, display_name="Engineering", email="old@example.com")

        async with make_client(build_scim_config(settings)) as client:
            response = await client.post(GROUPS, json=group_payload())

        assert response.status_code == 409
        assert (await load_group(session_factory, existing.uuid)).email == "old@example.com"


class TestReplaceGroup:
    async def test_put_replaces_members(self, client, session_factory, company):
        u1, u2, u3 = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1, u2])

        response = await client.put(f"{GROUPS}/{group.uuid}", json=group_payload(members=[u3]))

        assert response.status_code == 200
        assert response.json()["displayName"] == "Engineering"
        assert await member_uuids(session_factory, group) == [u3.uuid]

    async def test_put_without_members_is_bad_request(self, client, session_factory, company):
        u1, _, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        response = await client.put(f"{GROUPS}/{group.uuid}", json=group_payload())

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Invalid PUT request. The 'members' attribute of the request must exist "
            "and be an array of objects with a 'value'."
        )
        assert await member_uuids(session_factory, group) == [u1.uuid]

    async def test_put_with_empty_members_clears(self, client, session_factory, company):
        u1, _, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        response = await client.put(f"{GROUPS}/{group.uuid}", json=group_payload(members=[]))

        assert response.status_code == 200
        assert response.json()["members"] == []

    async def test_put_with_unknown_member(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.put(f"{GROUPS}/{group.uuid}", json=group_payload() | {"members": [{"value": "ghost"}]})

        assert response.status_code == 404

    async def test_put_checks_members_before_required_attributes(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.put(f"{GROUPS}/{group.uuid}", json={"displayName": "Only"})

        assert response.status_code == 400

    async def test_put_missing_attributes(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.put(f"{GROUPS}/{group.uuid}", json={"displayName": "Only", "members": []})

        assert response.status_code == 422

    async def test_put_invalid_active(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.put(f"{GROUPS}/{group.uuid}", json=group_payload(members=[], active="no"))

        assert response.status_code == 400


class TestPatchGroupMembers:
    async def test_remove_by_filter(self, client, session_factory, company):
        u1, u2, u3 = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1, u2, u3])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": f'members[value eq "{u1.uuid}"]'}
        ))

        assert response.status_code == 200
        assert response.json()["members"] == [{"value": u2.uuid}, {"value": u3.uuid}]

    async def test_remove_by_filter_without_match_is_noop(self, client, session_factory, company):
        u1, u2, u3 = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1, u2, u3])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": 'members[value eq "U99"]'}
        ))

        assert response.status_code == 200
        assert await member_uuids(session_factory, group) == [u1.uuid, u2.uuid, u3.uuid]

    async def test_remove_filter_does_not_touch_non_members(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])
        other = await create_group(session_factory, company, display_name="Other", members=[u2])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": f'members[value eq "{u2.uuid}"]'}
        ))

        assert response.status_code == 200
        assert await member_uuids(session_factory, group) == [u1.uuid]
        assert await member_uuids(session_factory, other) == [u2.uuid]

    async def test_unsupported_op_leaves_group_unchanged(self, client, session_factory, company):
        u1, u2, u3 = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1, u2, u3])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "delete", "path": "members"}
        ))

        assert response.status_code == 422
        assert response.json()["scimType"] == "invalidSyntax"
        assert await member_uuids(session_factory, group) == [u1.uuid, u2.uuid, u3.uuid]

    async def test_add_is_idempotent_for_duplicates(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "add", "path": "members", "value": [{"value": u2.uuid}, {"value": u2.uuid}, {"value": u1.uuid}]}
        ))

        assert response.status_code == 200
        assert await member_uuids(session_factory, group) == [u1.uuid, u2.uuid]

    async def test_add_without_path(self, client, session_factory, company):
        u1, _, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company)

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "Add", "value": {"members": [{"value": u1.uuid}]}}
        ))

        assert response.status_code == 200
        assert await member_uuids(session_factory, group) == [u1.uuid]

    async def test_add_to_other_path(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "add", "path": "displayName", "value": "X"}
        ))

        assert response.status_code == 422
        assert response.json()["scimType"] == "invalidPath"

    async def test_add_unknown_member(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "add", "path": "members", "value": [{"value": "ghost"}]}
        ))

        assert response.status_code == 404

    async def test_add_malformed_members(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "add", "path": "members", "value": {"value": "u1"}}
        ))

        assert response.status_code == 400

    async def test_second_replace_wins(self, client, session_factory, company):
        u1, u2, u3 = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "replace", "path": "members", "value": [{"value": u2.uuid}]},
            {"op": "replace", "path": "members", "value": [{"value": u3.uuid}, {"value": u1.uuid}]},
        ))

        assert response.status_code == 200
        assert await member_uuids(session_factory, group) == [u3.uuid, u1.uuid]

    async def test_remove_listed_members(self, client, session_factory, company):
        u1, u2, u3 = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1, u2, u3])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": "members", "value": [{"value": u1.uuid}, {"value": u3.uuid}]}
        ))

        assert response.status_code == 200
        assert await member_uuids(session_factory, group) == [u2.uuid]

    async def test_remove_listed_non_member(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": "members", "value": [{"value": u2.uuid}]}
        ))

        assert response.status_code == 404
        assert await member_uuids(session_factory, group) == [u1.uuid]

    async def test_remove_all_members(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1, u2])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": "members"}
        ))

        assert response.status_code == 200
        assert response.json()["members"] == []

    async def test_remove_with_bad_filter(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": 'members[display eq "x"]'}
        ))

        assert response.status_code == 422
        assert response.json()["scimType"] == "invalidFilter"

    async def test_remove_with_wrong_prefix(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "remove", "path": 'owners[value eq "x"]'}
        ))

        assert response.status_code == 422
        assert response.json()["scimType"] == "invalidPath"

    async def test_replace_attributes_and_status(self, client, session_factory, company):
        group = await create_group(session_factory, company)

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "replace", "value": {"displayName": "Renamed", "active": 0}}
        ))

        assert response.status_code == 200
        assert response.json()["displayName"] == "Renamed"
        assert (await load_group(session_factory, group.uuid)).archived_at is not None

    async def test_failure_rolls_back_whole_request(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
            {"op": "add", "path": "members", "value": [{"value": u2.uuid}]},
            {"op": "remove", "path": "members", "value": [{"value": "ghost"}]},
        ))

        assert response.status_code == 404
        assert await member_uuids(session_factory, group) == [u1.uuid]

    async def test_non_atomic_patch_keeps_applied_operations(self, make_client, settings, session_factory, company):
        settings.atomic_patch = False
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        async with make_client(build_scim_config(settings)) as client:
            response = await client.patch(f"{GROUPS}/{group.uuid}", json=patch_body(
                {"op": "add", "path": "members", "value": [{"value": u2.uuid}]},
                {"op": "remove", "path": "members", "value": [{"value": "ghost"}]},
            ))

        assert response.status_code == 404
        assert await member_uuids(session_factory, group) == [u1.uuid, u2.uuid]


class TestDeleteGroup:
    async def test_delete_removes_memberships(self, client, session_factory, company):
        u1, _, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1])

        response = await client.delete(f"{GROUPS}/{group.uuid}")

        assert response.status_code == 204
        assert await load_group(session_factory, group.uuid) is None
        async with session_factory() as session:
            assert (await session.scalars(select(GroupMembership))).all() == []

    async def test_deleting_user_removes_membership(self, client, session_factory, company):
        u1, u2, _ = await three_users(session_factory, company)
        group = await create_group(session_factory, company, members=[u1, u2])

        assert (await client.delete(f"/scim/v2/Users/{u1.uuid}")).status_code == 204

        assert await member_uuids(session_factory, group) == [u2.uuid]
