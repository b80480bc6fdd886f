"""File attachment collaborator; revisions may be uploaded with progress reporting."""
from __future__ import annotations

from typing import Any, Callable

from deki.app.application.arguments import FileRevisionArgs, validate_arguments
from deki.app.application.base import api_plug, parse_json
from deki.app.config.settings import Settings
from deki.app.constants import CONTENT_TYPE
from deki.app.domain.utility import get_resource_id
from deki.app.errors import HttpError
from deki.app.ports.http_client import AbstractHttpClient, HttpResponse, ProgressInfo, UploadProgress
from deki.app.schemas.api_error import to_api_request_error
from deki.app.schemas.file import FILE_REVISIONS_SCHEMA, FILE_SCHEMA


class File:
    def __init__(
        self,
        file_id: int,
        settings: Settings | None = None,
        *,
        http_client: AbstractHttpClient | None = None,
    ) -> None:
        self._id = file_id
        self._plug = api_plug(settings, http_client, "files", file_id)

    async def get_info(self) -> dict[str, Any]:
        response = await self._plug.at("info").get()
        return parse_json(response, FILE_SCHEMA)

    async def get_revisions(self) -> dict[str, Any]:
        response = await self._plug.at("revisions").get()
        return parse_json(response, FILE_REVISIONS_SCHEMA)

    async def set_description(self, description: str) -> dict[str, Any]:
        response = await self._plug.at("description").put(description, CONTENT_TYPE.TEXT)
        return parse_json(response, FILE_SCHEMA)

    async def delete(self) -> HttpResponse:
        return await self._plug.delete()

    async def add_revision(
        self,
        content: bytes | str,
        *,
        name: str,
        size: int | None = None,
        content_type: str | None = None,
        progress: Callable[[UploadProgress], None] | None = None,
    ) -> dict[str, Any]:
        """Upload ``content`` as a new revision named ``name``.

        With a ``progress`` callback the body goes through the upload transport
        and the callback receives ``UploadProgress(loaded, total)`` events.
        """
        args = validate_arguments(FileRevisionArgs, name=name, size=size, content_type=content_type)
        body = content.encode("utf-8") if isinstance(content, str) else content
        total = len(body) if args.size is None else args.size
        plug = self._plug.at(get_resource_id(args.name))
        try:
            if progress is not None:
                response = await plug.put(
                    body,
                    args.content_type,
                    progress=ProgressInfo(size=total, callback=progress),
                )
            else:
                response = await plug.with_header("Content-Length", total).put(body, args.content_type)
        except HttpError as exc:
            raise to_api_request_error(exc) from exc
        return parse_json(response, FILE_SCHEMA)
