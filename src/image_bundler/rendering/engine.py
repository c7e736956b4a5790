"""
Size Renderer
=============

Renderer abstraction for the size information image.

This module provides the SizeRenderer protocol. Implementations:
    - RemoteSizeRenderer: HTTP rendering service (rendering.remote)
    - LocalSizeRenderer: Pillow rasterization (rendering.local)

Design Rules:
    - Exactly one image per call
    - Any failure is fatal (RenderError, or ObjectRetrievalError when a
      font asset cannot be fetched)
"""

from typing import Protocol

from image_bundler.models.request import SizeSpec


class SizeRenderer(Protocol):
    """
    Protocol for size image renderers.

    All implementations must provide an async ``render`` method that
    takes a SizeSpec and returns encoded image bytes, and a ``close``
    method called once the invocation is over.
    """

    async def render(self, spec: SizeSpec) -> bytes:
        """
        Render one size image.

        Args:
            spec: TableSizeSpec or SingleLineSizeSpec

        Returns:
            Encoded image bytes
        """
        ...

    def close(self) -> None:
        """Release any connections held by the renderer."""
        ...
