"""
Image Bundler
=============

Per-item photo bundle assembly for the product catalog.

Given an item code and a photo slot count, the bundler fetches the
available photos from object storage, optionally renders one size
information image, packs everything into a ZIP archive and publishes
it as ``{item_code}.zip``.

Components:
    - storage: Object store access, photo retrieval, bundle publishing
    - rendering: Size image synthesis (remote service or Pillow)
    - archive: ZIP construction and scratch staging
    - pipeline: LangGraph orchestration and payload decoding

Example:
    import asyncio

    from image_bundler.config import settings
    from image_bundler.pipeline import create_pipeline, invoke

    outcome = asyncio.run(invoke(payload, create_pipeline(settings)))
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
