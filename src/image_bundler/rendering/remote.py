"""
Remote Size Renderer
====================

Renders size images through the HTTP rendering service.

Request Contract:
    POST {url}?type=size-table
        {"tableData": {"title": "...", "headers": [...], "rows": [[...]]}}

    POST {url}?type=one-line-size
        {"oneLineSizeData": {"title": "...", "size": "S M L"}}

    Authorization: Bearer {token}

The response body is the rendered image.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

import requests
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from image_bundler.errors import RenderError
from image_bundler.models.request import SingleLineSizeSpec, SizeSpec, TableSizeSpec


logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TableData(_CamelModel):
    title: str
    headers: List[str]
    rows: List[List[str]]


class TableRenderBody(_CamelModel):
    table_data: TableData


class OneLineSizeData(_CamelModel):
    title: str
    size: str


class OneLineRenderBody(_CamelModel):
    one_line_size_data: OneLineSizeData


class RemoteSizeRenderer:
    """
    Size renderer backed by the remote rendering service.

    Attributes:
        url: Render endpoint
        timeout: Per-call timeout in seconds (None = no timeout)
        table_title: Title drawn above size tables
        one_line_title: Title drawn above one-line sizes
    """

    def __init__(
        self,
        url: str,
        auth_token: str = "",
        timeout: Optional[float] = None,
        table_title: str = "尺码表",
        one_line_title: str = "关于尺码",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.table_title = table_title
        self.one_line_title = one_line_title
        self._auth_token = auth_token
        self._owns_session = session is None
        self._session = session or requests.Session()

    def close(self) -> None:
        """Close the HTTP session if this renderer created it."""
        if self._owns_session:
            self._session.close()

    def build_payload(self, spec: SizeSpec) -> Tuple[str, dict]:
        """Return the (render type, JSON body) for a size spec."""
        if isinstance(spec, TableSizeSpec):
            body = TableRenderBody(
                table_data=TableData(
                    title=self.table_title,
                    headers=list(spec.headers),
                    rows=[list(row) for row in spec.rows],
                )
            )
            return "size-table", body.model_dump(by_alias=True)
        if isinstance(spec, SingleLineSizeSpec):
            body = OneLineRenderBody(
                one_line_size_data=OneLineSizeData(title=self.one_line_title, size=spec.text)
            )
            return "one-line-size", body.model_dump(by_alias=True)
        raise RenderError(f"unsupported size spec: {type(spec).__name__}")

    async def render(self, spec: SizeSpec) -> bytes:
        render_type, body = self.build_payload(spec)
        logger.info(f"Remote render request: type={render_type}")
        return await asyncio.to_thread(self._post, render_type, body)

    def _post(self, render_type: str, body: dict) -> bytes:
        headers = {}
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"

        try:
            response = self._session.post(
                self.url,
                params={"type": render_type},
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Render request failed (type={render_type}): {e}")
            raise RenderError(f"render request failed: {e}") from e

        content = response.content
        if not content:
            raise RenderError(f"render service returned an empty body (type={render_type})")

        logger.info(f"Rendered size image: type={render_type}, len: {len(content)}")
        return content
