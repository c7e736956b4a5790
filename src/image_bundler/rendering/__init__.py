"""
Rendering Module
================

Synthesis of the optional size information image.

Components:
    - build_size_spec / normalize_size_label: Request body -> SizeSpec
    - SizeRenderer: Protocol for renderers
    - RemoteSizeRenderer: HTTP rendering service
    - LocalSizeRenderer: Pillow rasterization

Design Philosophy:
    Rendering is a pluggable black box. The pipeline only sees
    "SizeSpec in, image bytes out".
"""

from image_bundler.rendering.size_spec import (
    SEPARATORS,
    build_size_spec,
    normalize_size_label,
    split_size_headers,
)
from image_bundler.rendering.engine import SizeRenderer
from image_bundler.rendering.remote import RemoteSizeRenderer
from image_bundler.rendering.local import LocalSizeRenderer

__all__ = [
    "SEPARATORS",
    "build_size_spec",
    "normalize_size_label",
    "split_size_headers",
    "SizeRenderer",
    "RemoteSizeRenderer",
    "LocalSizeRenderer",
]
