"""
Pipeline Module
===============

LangGraph-based orchestration of the bundle assembly.

This module implements the per-invocation pipeline:
    - graph.py: State machine definition and stage nodes
    - invocation.py: Payload decoding and pipeline wiring

Key Design Decisions:
    - LangGraph is used for STRUCTURE only
    - Stage results are explicit; absent slots are tolerated in one place
    - Every fatal error becomes a typed Failure outcome
"""

from image_bundler.pipeline.graph import BundlePipeline
from image_bundler.pipeline.invocation import (
    create_pipeline,
    invoke,
    parse_invocation,
)

__all__ = [
    "BundlePipeline",
    "create_pipeline",
    "invoke",
    "parse_invocation",
]
