"""File attachment payload schemas."""
from __future__ import annotations

from deki.app.domain.model_parser import PropertyRule
from deki.app.schemas.page import PAGE_SCHEMA
from deki.app.schemas.user import USER_SCHEMA

FILE_SCHEMA = [
    PropertyRule("@id", name="id", transform="number"),
    PropertyRule("@revision", name="revision", transform="number"),
    PropertyRule("@res-id", name="resId", transform="number"),
    PropertyRule("@href", name="href"),
    PropertyRule("@res-is-head", name="resIsHead", transform="boolean"),
    PropertyRule("@res-is-deleted", name="resIsDeleted", transform="boolean"),
    PropertyRule("@res-rev-is-head", name="resRevIsHead", transform="boolean"),
    PropertyRule("@res-contents-id", name="resContentsId", transform="number"),
    PropertyRule("date.created", name="dateCreated", transform="date"),
    PropertyRule("description"),
    PropertyRule("filename"),
    PropertyRule("location"),
    PropertyRule(
        "contents",
        transform=[
            PropertyRule("@type", name="type"),
            PropertyRule("@size", name="size", transform="number"),
            PropertyRule("@href", name="href"),
            PropertyRule("@height", name="height", transform="number"),
            PropertyRule("@width", name="width", transform="number"),
        ],
    ),
    PropertyRule(
        "revisions",
        transform=[
            PropertyRule("@count", name="count", transform="number"),
            PropertyRule("@totalcount", name="totalCount", transform="number"),
        ],
    ),
    PropertyRule("user.createdby", name="userCreatedBy", transform=USER_SCHEMA),
    PropertyRule("page.parent", name="pageParent", transform=PAGE_SCHEMA),
]

FILE_REVISIONS_SCHEMA = [
    PropertyRule("@count", name="count", transform="number"),
    PropertyRule("@totalcount", name="totalCount", transform="number"),
    PropertyRule("@href", name="href"),
    PropertyRule("file", name="files", is_array=True, transform=FILE_SCHEMA),
]
