from __future__ import annotations

from typing import Any, Mapping

from deki.app.domain.model_parser import PropertyRule


def _split_operations(value: Any) -> list[str]:
    if isinstance(value, str):
        return value.split(",")
    return []


def _role(value: Any) -> dict[str, Any]:
    role: dict[str, Any] = {}
    if isinstance(value, str):
        role["name"] = value
    elif isinstance(value, Mapping):
        if "#text" in value:
            role["name"] = value["#text"]
        if "@id" in value:
            role["id"] = int(value["@id"])
        if "@href" in value:
            role["href"] = value["@href"]
    return role


PERMISSIONS_SCHEMA = [
    PropertyRule(["operations", "#text"], transform=_split_operations),
    PropertyRule("role", transform=_role),
    PropertyRule(
        "restriction",
        transform=[
            PropertyRule("@id", name="id", transform="number"),
            PropertyRule("#text", name="name"),
        ],
    ),
]
