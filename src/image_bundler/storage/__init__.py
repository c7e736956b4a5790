"""
Storage Module
==============

Object storage access for the image bundler.

Components:
    - ObjectStore: Protocol for storage backends
    - S3ObjectStore: boto3-backed store (production)
    - LocalObjectStore: Directory-backed store (development)
    - PhotoRetriever: Fetches photo slots, tolerating absent objects
    - BundlePublisher: Stores the finished bundle, owns scratch lifetime
"""

from image_bundler.storage.client import (
    LocalObjectStore,
    ObjectNotFound,
    ObjectStore,
    S3ObjectStore,
)
from image_bundler.storage.retriever import PhotoRetriever
from image_bundler.storage.publisher import BundlePublisher

__all__ = [
    "ObjectStore",
    "ObjectNotFound",
    "S3ObjectStore",
    "LocalObjectStore",
    "PhotoRetriever",
    "BundlePublisher",
]
