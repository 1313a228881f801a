"""Схемы SCIM по умолчанию для пользователей и групп"""

from .models.schema_map import FieldRef
from .models.scim import SCIMSchema


USER_SCHEMA = {
    "schemas": [SCIMSchema.USER.value],
    "id": FieldRef("uuid"),
    "userName": FieldRef("email"),
    "name": {
        "givenName": FieldRef("first_name"),
        "familyName": FieldRef("last_name"),
    },
    "emails": [
        {
            "value": FieldRef("email"),
            "primary": True,
        },
    ],
    "active": FieldRef("active"),
    "meta": {
        "resourceType": "User",
    },
}

# Атрибуты, которые клиент может записывать (create / put / patch replace)
USER_MUTABLE_SCHEMA = {
    "name": {
        "givenName": FieldRef("first_name"),
        "familyName": FieldRef("last_name"),
    },
    "emails": [
        {
            "value": FieldRef("email"),
        },
    ],
}

USER_QUERYABLE_ATTRIBUTES = {
    "userName": "email",
    "email": "email",
    "emails.value": "email",
    "givenName": "first_name",
    "name.givenName": "first_name",
    "familyName": "last_name",
    "name.familyName": "last_name",
}

GROUP_SCHEMA = {
    "schemas": [SCIMSchema.GROUP.value],
    "id": FieldRef("uuid"),
    "displayName": FieldRef("display_name"),
    "email": FieldRef("email"),
    "members": [],
    "meta": {
        "resourceType": "Group",
    },
}

GROUP_MUTABLE_SCHEMA = {
    "displayName": FieldRef("display_name"),
    "email": FieldRef("email"),
}

GROUP_QUERYABLE_ATTRIBUTES = {
    "displayName": "display_name",
}

GROUP_MEMBER_SCHEMA = {
    "value": FieldRef("uuid"),
}

SERVICE_PROVIDER_CONFIG = {
    "schemas": [SCIMSchema.SERVICE_PROVIDER_CONFIG.value],
    "documentationUri": "https://tools.ietf.org/html/rfc7644",
    "patch": {
        "supported": True
    },
    "bulk": {
        "supported": False,
        "maxOperations": 0,
        "maxPayloadSize": 0
    },
    "filter": {
        "supported": True,
        "maxResults": 1000
    },
    "changePassword": {
        "supported": False
    },
    "sort": {
        "supported": False
    },
    "etag": {
        "supported": False
    },
    "authenticationSchemes": [
        {
            "type": "httpbasic",
            "name": "HTTP Basic",
            "description": "Authentication scheme using the HTTP Basic Standard",
            "specUri": "https://tools.ietf.org/html/rfc2617",
            "primary": True
        }
    ],
    "meta": {
        "resourceType": "ServiceProviderConfig",
        "version": "v1"
    }
}
