"""Page payload schemas.

``PAGE_SCHEMA`` embeds itself for the parent page and the draft, through lazy
references, so arbitrarily deep ancestor chains parse with one schema.
"""
from __future__ import annotations

from typing import Any
from urllib.parse import unquote

from deki.app.domain.model_parser import PropertyRule, Schema, is_object, lazy
from deki.app.schemas.permissions import PERMISSIONS_SCHEMA
from deki.app.schemas.user import USER_SCHEMA

PAGE_RATING_SCHEMA = [
    PropertyRule("@date", name="date", transform="date"),
    PropertyRule("@count", name="count", transform="number"),
    PropertyRule("@seated.count", name="seatedCount", transform="number"),
    PropertyRule("@unseated.count", name="unseatedCount", transform="number"),
    PropertyRule("@anonymous.count", name="anonymousCount", transform="number"),
    PropertyRule("@score", name="score", transform="number"),
    PropertyRule("@seated.score", name="seatedScore", transform="number"),
    PropertyRule("@unseated.score", name="unseatedScore", transform="number"),
    PropertyRule("@anonymous.score", name="anonymousScore", transform="number"),
    PropertyRule("@score.trend", name="scoreTrend", transform="number"),
    PropertyRule("@seated.score.trend", name="seatedScoreTrend", transform="number"),
    PropertyRule("@unseated.score.trend", name="unseatedScoreTrend", transform="number"),
    PropertyRule(
        "user.ratedby",
        name="userRatedBy",
        transform=[
            PropertyRule("@id", name="id", transform="number"),
            PropertyRule("@score", name="score", transform="number"),
            PropertyRule("@date", name="date", transform="date"),
            PropertyRule("@href", name="href"),
            PropertyRule("@seated", name="seated", transform="boolean"),
        ],
    ),
]


def _rating_transform(rating: Any) -> Any:
    return PAGE_RATING_SCHEMA if is_object(rating) else None


def _original_path(value: Any) -> str | None:
    if value:
        return unquote(value)
    return None


PAGE_SCHEMA = Schema(
    rules=(
        PropertyRule("@id", name="id", transform="number"),
        PropertyRule("title"),
        PropertyRule("@guid", name="guid"),
        PropertyRule("uri.ui", name="uri"),
        PropertyRule("@href", name="href"),
        PropertyRule("@state", name="state"),
        PropertyRule("@draft.state", name="draftState"),
        PropertyRule("article"),
        PropertyRule("language"),
        PropertyRule("namespace"),
        PropertyRule("language.effective", name="languageEffective"),
        PropertyRule("timeuuid"),
        PropertyRule(["path", "#text"]),
        PropertyRule(["path", "@type"], name="pathType"),
        PropertyRule(["path", "@seo"], name="pathSeo", transform="boolean"),
        PropertyRule("restriction"),
        PropertyRule("@revision", name="revision", transform="number"),
        PropertyRule("path.original", name="originalPath", transform=_original_path),
        PropertyRule("@deleted", name="deleted", transform="boolean"),
        PropertyRule("@publish", name="publish", transform="boolean"),
        PropertyRule("@unpublish", name="unpublish", transform="boolean"),
        PropertyRule("@deactivate", name="deactivate", transform="boolean"),
        PropertyRule("@virtual", name="virtual", transform="boolean"),
        PropertyRule("@subpages", name="hasSubpages", transform="boolean"),
        PropertyRule("@files", name="files", transform="number"),
        PropertyRule("@terminal", name="terminal", transform="boolean"),
        PropertyRule("overview"),
        PropertyRule("user.author", name="userAuthor", transform=USER_SCHEMA),
        PropertyRule("date.created", name="dateCreated", transform="date"),
        PropertyRule("date.modified", name="dateModified", transform="date"),
        PropertyRule("date.edited", name="dateEdited", transform="date"),
        PropertyRule(["revisions", "@count"], name="revisionCount", transform="number"),
        PropertyRule(["comments", "@count"], name="commentCount", transform="number"),
        PropertyRule(["permissions", "permissions.page"], name="permissions", transform=PERMISSIONS_SCHEMA),
        PropertyRule(
            ["security", "permissions.effective"],
            name="effectivePermissions",
            transform=PERMISSIONS_SCHEMA,
        ),
        PropertyRule("rating", construct_transform=_rating_transform),
        PropertyRule(
            "metrics",
            transform=[
                PropertyRule("metric.charcount", name="charCount", transform="number"),
                PropertyRule("metric.views", name="views", transform="number"),
            ],
        ),
        PropertyRule(
            ["tags", "tag"],
            name="tags",
            is_array=True,
            transform=[
                PropertyRule("@href", name="href"),
                PropertyRule("@id", name="id", transform="number"),
                PropertyRule("@value", name="value"),
                PropertyRule("title"),
                PropertyRule("type"),
                PropertyRule("uri"),
            ],
        ),
        PropertyRule("page.parent", name="pageParent", transform=lazy(lambda: PAGE_SCHEMA)),
        PropertyRule("draft", transform=lazy(lambda: PAGE_SCHEMA)),
    ),
)
