"""Streaming loop: query chroma chunks -> node -> cross-similarity matrices.

Single-threaded cooperative scheduler: every incoming chunk is pushed into
the node's query port and the node is run until it reports that it needs
more input. When the source is exhausted the port is closed and the node
is drained, so the final partial window is still processed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import numpy as np

from chroma_crosssim.features.config import EngineConfig
from chroma_crosssim.pipeline.node import NodeStatus, StreamingCrossSimilarity

logger = logging.getLogger(__name__)

MatrixCallback = Callable[[np.ndarray], None]


@dataclass
class StreamingConfig:
    """Streaming scheduler parameters."""

    # Upper bound on node runs per scheduling round (guards a stuck node)
    max_runs_per_chunk: int = 100_000


class StreamingCrossSimilarityPipeline:
    """Drives a StreamingCrossSimilarity node from an iterator of query chunks.

    Interface:
      pipeline = StreamingCrossSimilarityPipeline(
          reference=reference_hpcp,
          config=EngineConfig(embed_dimension=9),
          on_matrix=handle_matrix,
      )
      matrices = pipeline.run(iter(query_chunks))
    """

    def __init__(
        self,
        reference=None,
        config: Optional[EngineConfig] = None,
        streaming_config: Optional[StreamingConfig] = None,
        on_matrix: Optional[MatrixCallback] = None,
        node: Optional[StreamingCrossSimilarity] = None,
    ):
        if node is None:
            if reference is None:
                raise ValueError("either reference or node is required")
            node = StreamingCrossSimilarity(reference, config)
        self.node = node
        self.streaming_config = streaming_config or StreamingConfig()
        self.on_matrix = on_matrix or (lambda m: None)
        self._stopped = False

    def stop(self) -> None:
        """Signal the run loop to exit (checked each chunk)."""
        self._stopped = True

    def _schedule(self) -> NodeStatus:
        """Run the node until it stops making progress; emit its output."""
        status = NodeStatus.OK
        for _ in range(self.streaming_config.max_runs_per_chunk):
            status = self.node.process()
            for matrix in self.node.csm.drain():
                self.on_matrix(matrix)
            if status is not NodeStatus.OK:
                return status
        logger.warning(
            "Node still producing after %d runs; yielding",
            self.streaming_config.max_runs_per_chunk,
        )
        return status

    def feed(self, chunk) -> NodeStatus:
        """Push one chunk of query frames and run the node on it."""
        chunk = np.asarray(chunk, dtype=np.float64)
        if chunk.size > 0:
            self.node.query.push(chunk)
        return self._schedule()

    def finish(self) -> NodeStatus:
        """Close the query stream and drain the remaining frames."""
        self.node.query.close()
        status = self._schedule()
        while status is NodeStatus.OK:
            status = self._schedule()
        return status

    def run(self, chunks: Iterable[np.ndarray]) -> List[np.ndarray]:
        """Run until the iterator is exhausted (or stopped); return all matrices."""
        self._stopped = False
        matrices: List[np.ndarray] = []
        user_callback = self.on_matrix

        def collect(matrix: np.ndarray) -> None:
            matrices.append(matrix)
            user_callback(matrix)

        self.on_matrix = collect
        try:
            for chunk in chunks:
                if self._stopped:
                    break
                self.feed(chunk)
            if not self._stopped:
                self.finish()
        finally:
            self.on_matrix = user_callback
        logger.debug("Stream finished with %d matrices", len(matrices))
        return matrices

    def run_for_n_updates(self, n: int, chunks: Iterable[np.ndarray]) -> List[np.ndarray]:
        """Feed chunks until at least n matrices were produced; used for tests."""
        self._stopped = False
        matrices: List[np.ndarray] = []
        user_callback = self.on_matrix

        def collect(matrix: np.ndarray) -> None:
            matrices.append(matrix)
            user_callback(matrix)

        self.on_matrix = collect
        try:
            for chunk in chunks:
                if len(matrices) >= n:
                    break
                self.feed(chunk)
        finally:
            self.on_matrix = user_callback
        return matrices
