"""
Bundle Pipeline Graph
=====================

LangGraph state machine that assembles and publishes one item bundle.

LangGraph is used for CONTROL FLOW only.

Graph Structure:
    START → retrieve ─┬─(size spec)──→ render ─→ archive → publish → END
                      └─(no size spec)─────────↗
    Every node routes to ``failed`` → END on a fatal error.

Stage policy:
    - retrieve: absent slots are skipped; any other slot failure is fatal
    - render, archive, publish: fail fast, first error ends the run
    - Scratch is acquired before the graph runs and released on every
      outcome (see BundlePublisher.staging)
"""

import logging
from typing import Any, Dict, List, Optional, TypedDict

from langgraph.graph import StateGraph, END

from image_bundler.errors import BundleError
from image_bundler.archive.builder import ArchiveBuilder
from image_bundler.archive.scratch import ScratchStaging
from image_bundler.models.bundle import BundleArchive, PhotoPayload
from image_bundler.models.outcome import BundleOutcome
from image_bundler.models.request import BundleRequest
from image_bundler.rendering.engine import SizeRenderer
from image_bundler.storage.publisher import BundlePublisher
from image_bundler.storage.retriever import PhotoRetriever


logger = logging.getLogger(__name__)


class BundleGraphState(TypedDict, total=False):
    """
    State passed through the bundle graph.

    Attributes:
        request: The validated request
        scratch: Scratch resource for this invocation
        photos: Retrieved photos in slot order
        size_image: Rendered size image (if requested)
        archive: Planned archive (after the archive stage)
        bundle_key: Published key (after the publish stage)
        error: First fatal error, if any
        stage: Last stage entered
    """
    request: BundleRequest
    scratch: ScratchStaging
    photos: List[PhotoPayload]
    size_image: Optional[bytes]
    archive: Optional[BundleArchive]
    bundle_key: Optional[str]
    error: Optional[BundleError]
    stage: str


class BundlePipeline:
    """
    Orchestrates retrieval, rendering, archiving and publishing.

    All collaborators are injected; the pipeline holds no state between
    runs.
    """

    def __init__(
        self,
        retriever: PhotoRetriever,
        renderer: Optional[SizeRenderer],
        builder: ArchiveBuilder,
        publisher: BundlePublisher,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            retriever: Photo slot retriever
            renderer: Size image renderer (only required for requests
                that carry a size spec)
            builder: Archive builder
            publisher: Bundle publisher, also owns scratch lifetime
        """
        self.retriever = retriever
        self.renderer = renderer
        self.builder = builder
        self.publisher = publisher

        self._graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(BundleGraphState)

        workflow.add_node("retrieve", self._retrieve_node)
        workflow.add_node("render", self._render_node)
        workflow.add_node("archive", self._archive_node)
        workflow.add_node("publish", self._publish_node)
        workflow.add_node("failed", self._failed_node)

        workflow.set_entry_point("retrieve")
        workflow.add_conditional_edges(
            "retrieve",
            self._route_after_retrieve,
            {"render": "render", "archive": "archive", "failed": "failed"},
        )
        workflow.add_conditional_edges(
            "render",
            self._route_on_error("archive"),
            {"archive": "archive", "failed": "failed"},
        )
        workflow.add_conditional_edges(
            "archive",
            self._route_on_error("publish"),
            {"publish": "publish", "failed": "failed"},
        )
        workflow.add_conditional_edges(
            "publish",
            self._route_on_error(END),
            {END: END, "failed": "failed"},
        )
        workflow.add_edge("failed", END)

        return workflow.compile()

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    @staticmethod
    def _route_after_retrieve(state: BundleGraphState) -> str:
        if state.get("error") is not None:
            return "failed"
        if state["request"].size_spec is not None:
            return "render"
        return "archive"

    @staticmethod
    def _route_on_error(next_node: str):
        def route(state: BundleGraphState) -> str:
            return "failed" if state.get("error") is not None else next_node
        return route

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    async def _retrieve_node(self, state: BundleGraphState) -> Dict[str, Any]:
        request = state["request"]
        try:
            photos = await self.retriever.retrieve_all(request.identifier, request.image_count)
        except BundleError as e:
            return {"stage": "retrieve", "error": e}
        return {"stage": "retrieve", "photos": photos}

    async def _render_node(self, state: BundleGraphState) -> Dict[str, Any]:
        request = state["request"]
        if self.renderer is None:
            raise RuntimeError("size spec present but no renderer configured")
        try:
            size_image = await self.renderer.render(request.size_spec)
        except BundleError as e:
            return {"stage": "render", "error": e}
        return {"stage": "render", "size_image": size_image}

    async def _archive_node(self, state: BundleGraphState) -> Dict[str, Any]:
        request = state["request"]
        try:
            archive = self.builder.build(
                request.identifier,
                state.get("photos", []),
                state.get("size_image"),
                state["scratch"],
            )
        except BundleError as e:
            return {"stage": "archive", "error": e}
        return {"stage": "archive", "archive": archive}

    async def _publish_node(self, state: BundleGraphState) -> Dict[str, Any]:
        request = state["request"]
        try:
            key = await self.publisher.publish(request.identifier, state["scratch"])
        except BundleError as e:
            return {"stage": "publish", "error": e}
        return {"stage": "publish", "bundle_key": key}

    async def _failed_node(self, state: BundleGraphState) -> Dict[str, Any]:
        error = state["error"]
        stage = state.get("stage")
        logger.error(
            f"Bundle for {state['request'].identifier} failed at "
            f"stage={stage}: {error}"
        )
        return {"stage": stage}

    def close(self) -> None:
        """Release renderer connections. Call once the invocation is over."""
        if self.renderer is not None:
            self.renderer.close()

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    async def run(self, request: BundleRequest) -> BundleOutcome:
        """
        Assemble and publish the bundle for one request.

        Never raises BundleError; every fatal error becomes a Failure
        outcome.

        Args:
            request: Validated bundle request

        Returns:
            BundleOutcome
        """
        logger.info(
            f"Bundling {request.identifier}: image_count={request.image_count}, "
            f"size_spec={request.size_spec.kind if request.size_spec else None}"
        )

        try:
            with self.publisher.staging(request.identifier) as scratch:
                final_state = await self._graph.ainvoke({
                    "request": request,
                    "scratch": scratch,
                    "photos": [],
                    "size_image": None,
                    "archive": None,
                    "bundle_key": None,
                    "error": None,
                    "stage": "start",
                })
                error = final_state.get("error")
                if error is not None:
                    raise error
        except BundleError as e:
            return BundleOutcome.from_error(e)

        archive = final_state["archive"]
        return BundleOutcome.success(final_state["bundle_key"], archive.names)
