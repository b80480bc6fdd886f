"""User and group payload schemas."""
from __future__ import annotations

from deki.app.domain.model_parser import PropertyRule
from deki.app.schemas.permissions import PERMISSIONS_SCHEMA

GROUP_SCHEMA = [
    PropertyRule("@id", name="id", transform="number"),
    PropertyRule("@href", name="href"),
    PropertyRule("groupname", name="groupName"),
    PropertyRule("permissions.group", name="groupPermissions", transform=PERMISSIONS_SCHEMA),
    PropertyRule(
        "users",
        transform=[
            PropertyRule("@count", name="count"),
            PropertyRule("@href", name="href"),
        ],
    ),
]

USER_SCHEMA = [
    PropertyRule("@id", name="id", transform="number"),
    PropertyRule("@anonymous", name="anonymous", transform="boolean"),
    PropertyRule("@wikiid", name="wikiId"),
    PropertyRule("@href", name="href"),
    PropertyRule("date.created", name="dateCreated", transform="date"),
    PropertyRule("date.lastlogin", name="lastLoginDate", transform="date"),
    PropertyRule("email"),
    PropertyRule("fullname"),
    PropertyRule(["license.seat", "#text"], name="seated", transform="boolean"),
    PropertyRule(["license.seat", "@owner"], name="siteOwner", transform="boolean"),
    PropertyRule("nick"),
    PropertyRule(["password", "@exists"], name="passwordExists", transform="boolean"),
    PropertyRule("status"),
    PropertyRule("username"),
    PropertyRule("permissions.user", name="userPermissions", transform=PERMISSIONS_SCHEMA),
    PropertyRule(["groups", "group"], name="groups", is_array=True, transform=GROUP_SCHEMA),
]

USER_LIST_SCHEMA = [
    PropertyRule("@count", name="count", transform="number"),
    PropertyRule("@querycount", name="queryCount", transform="number"),
    PropertyRule("@totalcount", name="totalCount", transform="number"),
    PropertyRule("@href", name="href"),
    PropertyRule("user", name="users", is_array=True, transform=USER_SCHEMA),
]
