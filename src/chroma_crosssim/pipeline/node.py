"""Streaming cross-similarity node: query frames in, one matrix per run out.

The reference chromagram is held in memory for the node's lifetime; the
query arrives as a stream of frames and is processed in windows of
``min_frames_size`` frames, advancing by ``tau`` frames per run.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

import numpy as np

from chroma_crosssim.engine import check_bins, transpose_to_query_key
from chroma_crosssim.errors import EmptyResultError, InvalidInputError
from chroma_crosssim.features.config import DEFAULT_CONFIG, MATCH_COEF, MISMATCH_COEF, EngineConfig
from chroma_crosssim.features.embedding import as_feature_matrix, time_embedding
from chroma_crosssim.pipeline.ports import AcquireResult, FrameBuffer, TokenBuffer
from chroma_crosssim.similarity.binary import chroma_binary_sim_matrix, make_scratch, shift_stack
from chroma_crosssim.similarity.threshold import (
    combine_masks,
    pairwise_distances,
    reference_axis_mask,
    threshold_mask,
)

logger = logging.getLogger(__name__)


class NodeStatus(enum.Enum):
    OK = "ok"
    NO_INPUT = "no_input"  # waiting for more query frames
    NO_MORE_INPUT = "no_more_input"  # stream closed and fully consumed


def pad_window(frames: np.ndarray, min_frames: int) -> np.ndarray:
    """Extend an undersized window by repeating its frames from the start."""
    n = len(frames)
    if n >= min_frames:
        return frames.copy()
    idx = np.arange(min_frames - n) % n
    return np.concatenate([frames, frames[idx]])


class StreamingCrossSimilarity:
    """Pull-based node computing a cross-similarity matrix per query window.

    Interface:
      node = StreamingCrossSimilarity(reference_hpcp, EngineConfig(...))
      node.query.push(frames)
      while node.process() is NodeStatus.OK:
          pass
      matrices = node.csm.drain()

    The query axis is never thresholded in streaming mode; only the
    reference side applies the percentile threshold.
    """

    def __init__(self, reference_feature, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        reference = as_feature_matrix(reference_feature, "referenceFeature").copy()
        reference.setflags(write=False)
        cfg = self.config
        window = cfg.embed_dimension * cfg.tau
        if cfg.embed_dimension > 1 and len(reference) <= window:
            raise InvalidInputError(
                f"reference of {len(reference)} frames does not fill the embedding window ({window} frames)"
            )
        self._reference = reference
        self._min_frames_size = cfg.min_frames_size

        # Without OTI the reference never changes, so its embedding and
        # binary-scorer buffers are built once per node.
        self._reference_embed: Optional[np.ndarray] = None
        self._shifted_reference: Optional[np.ndarray] = None
        self._scratch: Optional[np.ndarray] = None
        if not cfg.oti:
            self._reference_embed = time_embedding(reference, cfg.embed_dimension, cfg.tau)
            if cfg.oti_binary:
                self._shifted_reference = shift_stack(self._reference_embed, cfg.noti)
                self._scratch = make_scratch(cfg.noti, len(self._reference_embed))

        self.query = FrameBuffer(
            acquire_size=self._min_frames_size,
            release_size=self.config.tau,
        )
        self.csm = TokenBuffer(acquire_size=1, release_size=1)

    @property
    def reference(self) -> np.ndarray:
        """The reference chromagram as configured (read-only, never rotated)."""
        return self._reference

    @property
    def min_frames_size(self) -> int:
        return self._min_frames_size

    def reset(self) -> None:
        """Clear buffered data and restore the configured port sizes."""
        self.query.clear()
        self.query.acquire_size = self._min_frames_size
        self.query.release_size = self.config.tau
        self.csm.clear()

    def process(self) -> NodeStatus:
        """Run once if enough query frames are buffered."""
        status = self.query.try_acquire()
        logger.debug(
            "data acquired (in: %d of %d available - out: %d)",
            self.query.acquire_size,
            self.query.available,
            self.csm.acquire_size,
        )

        if status is AcquireResult.INSUFFICIENT:
            return NodeStatus.NO_INPUT
        if status is AcquireResult.END_OF_STREAM:
            # No more frames are coming: process what is left as a final,
            # shorter window instead of waiting.
            available = self.query.available
            if available == 0:
                return NodeStatus.NO_MORE_INPUT
            self.query.acquire_size = available
            self.query.release_size = available
            return self.process()

        window = pad_window(self.query.tokens(), self._min_frames_size)
        self.csm.push(self.compute_window(window))
        self.query.release()
        return NodeStatus.OK

    def compute_window(self, query_window: np.ndarray) -> np.ndarray:
        """Cross-similarity of one (padded) query window against the reference."""
        cfg = self.config
        check_bins(query_window, self._reference)

        query_embed = time_embedding(query_window, cfg.embed_dimension, cfg.tau)
        if cfg.oti:
            reference = transpose_to_query_key(query_window, self._reference, cfg.noti)
            reference_embed = time_embedding(reference, cfg.embed_dimension, cfg.tau)
        else:
            reference_embed = self._reference_embed

        if cfg.oti_binary:
            csm = chroma_binary_sim_matrix(
                query_embed,
                reference_embed,
                cfg.noti,
                MATCH_COEF,
                MISMATCH_COEF,
                scratch=self._scratch,
                shifted_b=self._shifted_reference,
            )
        else:
            pdistances = pairwise_distances(query_embed, reference_embed)
            tp_distances = pdistances.T
            similarity_x = threshold_mask(pdistances, cfg.kappa, optimise_threshold=True)
            similarity_y = reference_axis_mask(tp_distances, cfg.kappa)
            csm = combine_masks(similarity_x, similarity_y)

        if csm.size == 0:
            raise EmptyResultError("query window produced an empty similarity matrix")
        return csm
