"""
Local Size Renderer
===================

Rasterizes size images in-process with Pillow.

This renderer:
    - Fetches the font asset from object storage once per instance
    - Draws a title plus either a grid table or one line of text
    - Encodes the result as JPEG

Design Rules:
    - Font fetch failure is a retrieval failure, not a render failure
    - Any Pillow error is a RenderError
    - With no font key configured, Pillow's default font is used
"""

import asyncio
import io
import logging
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from image_bundler.errors import ObjectRetrievalError, RenderError
from image_bundler.models.request import SingleLineSizeSpec, SizeSpec, TableSizeSpec
from image_bundler.storage.client import ObjectNotFound, ObjectStore


logger = logging.getLogger(__name__)

BACKGROUND = (255, 255, 255)
FOREGROUND = (33, 33, 33)
GRID = (160, 160, 160)
HEADER_FILL = (240, 240, 240)


class LocalSizeRenderer:
    """
    Size renderer backed by Pillow.

    Attributes:
        store: Object store holding the font asset
        font_bucket: Bucket of the font asset
        font_key: Key of the font asset (None = Pillow default font)
        font_size: Point size for all text
        padding: Cell and margin padding in pixels
    """

    def __init__(
        self,
        store: Optional[ObjectStore] = None,
        font_bucket: Optional[str] = None,
        font_key: Optional[str] = None,
        font_size: int = 28,
        table_title: str = "尺码表",
        one_line_title: str = "关于尺码",
        padding: int = 16,
    ) -> None:
        if font_key and (store is None or not font_bucket):
            raise ValueError("font_key requires a store and font_bucket")

        self.store = store
        self.font_bucket = font_bucket
        self.font_key = font_key
        self.font_size = font_size
        self.table_title = table_title
        self.one_line_title = one_line_title
        self.padding = padding

        self._font_bytes: Optional[bytes] = None
        self._font_fetches = 0

    @property
    def font_fetches(self) -> int:
        """Number of times the font asset was fetched."""
        return self._font_fetches

    async def _load_font_bytes(self) -> Optional[bytes]:
        if not self.font_key:
            return None
        if self._font_bytes is not None:
            return self._font_bytes

        self._font_fetches += 1
        try:
            self._font_bytes = await self.store.get_object(self.font_bucket, self.font_key)
        except ObjectNotFound as e:
            raise ObjectRetrievalError(
                f"font asset not found: {self.font_bucket}/{self.font_key}"
            ) from e
        except Exception as e:
            raise ObjectRetrievalError(
                f"failed to fetch font asset {self.font_bucket}/{self.font_key}: {e}"
            ) from e

        logger.info(f"Loaded font asset {self.font_key}, len: {len(self._font_bytes)}")
        return self._font_bytes

    def close(self) -> None:
        pass

    async def render(self, spec: SizeSpec) -> bytes:
        font_bytes = await self._load_font_bytes()
        try:
            return await asyncio.to_thread(self._render_sync, spec, font_bytes)
        except RenderError:
            raise
        except Exception as e:
            logger.error(f"Local rasterization failed: {e}")
            raise RenderError(f"local rasterization failed: {e}") from e

    # -------------------------------------------------------------------------
    # Rasterization
    # -------------------------------------------------------------------------

    def _render_sync(self, spec: SizeSpec, font_bytes: Optional[bytes]) -> bytes:
        font = self._make_font(font_bytes)
        if isinstance(spec, TableSizeSpec):
            image = self._draw_table(spec, font)
        elif isinstance(spec, SingleLineSizeSpec):
            image = self._draw_single_line(spec, font)
        else:
            raise RenderError(f"unsupported size spec: {type(spec).__name__}")

        out = io.BytesIO()
        image.save(out, format="JPEG", quality=95)
        return out.getvalue()

    def _make_font(self, font_bytes: Optional[bytes]):
        if font_bytes is None:
            return ImageFont.load_default()
        try:
            return ImageFont.truetype(io.BytesIO(font_bytes), size=self.font_size)
        except OSError as e:
            raise RenderError(f"invalid font asset {self.font_key}: {e}") from e

    @staticmethod
    def _measure(font, text: str) -> Tuple[int, int]:
        probe = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        left, top, right, bottom = probe.textbbox((0, 0), text, font=font)
        return right - left, bottom - top

    def _draw_single_line(self, spec: SingleLineSizeSpec, font) -> Image.Image:
        pad = self.padding
        title_w, title_h = self._measure(font, self.one_line_title)
        text_w, text_h = self._measure(font, spec.text)

        width = max(title_w, text_w) + 2 * pad
        height = title_h + text_h + 3 * pad

        image = Image.new("RGB", (max(width, 1), max(height, 1)), BACKGROUND)
        draw = ImageDraw.Draw(image)
        draw.text(((width - title_w) // 2, pad), self.one_line_title, font=font, fill=FOREGROUND)
        draw.text((pad, title_h + 2 * pad), spec.text, font=font, fill=FOREGROUND)
        return image

    def _draw_table(self, spec: TableSizeSpec, font) -> Image.Image:
        pad = self.padding
        grid: List[Sequence[str]] = [spec.headers, *spec.rows]
        columns = max((len(row) for row in grid), default=0)

        col_widths = [0] * columns
        row_height = self._measure(font, "Hg")[1]
        for row in grid:
            for index, cell in enumerate(row):
                cell_w, cell_h = self._measure(font, cell)
                col_widths[index] = max(col_widths[index], cell_w)
                row_height = max(row_height, cell_h)

        cell_widths = [w + 2 * pad for w in col_widths]
        cell_height = row_height + 2 * pad
        table_w = sum(cell_widths)
        table_h = cell_height * len(grid) if columns else 0

        title_w, title_h = self._measure(font, self.table_title)
        width = max(table_w, title_w) + 2 * pad
        height = title_h + table_h + 3 * pad

        image = Image.new("RGB", (width, height), BACKGROUND)
        draw = ImageDraw.Draw(image)
        draw.text(((width - title_w) // 2, pad), self.table_title, font=font, fill=FOREGROUND)

        origin_x = (width - table_w) // 2
        origin_y = title_h + 2 * pad
        for row_index, row in enumerate(grid):
            y = origin_y + row_index * cell_height
            x = origin_x
            for col_index in range(columns):
                box = (x, y, x + cell_widths[col_index], y + cell_height)
                fill = HEADER_FILL if row_index == 0 else BACKGROUND
                draw.rectangle(box, fill=fill, outline=GRID)
                if col_index < len(row):
                    cell = row[col_index]
                    cell_w, _ = self._measure(font, cell)
                    draw.text(
                        (x + (cell_widths[col_index] - cell_w) // 2, y + pad),
                        cell,
                        font=font,
                        fill=FOREGROUND,
                    )
                x += cell_widths[col_index]
        return image
