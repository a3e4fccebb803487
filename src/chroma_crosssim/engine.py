"""Batch cross-similarity matrix between a query and a reference chromagram.

Pipeline: (optional OTI transposition) -> time embedding -> either OTI
binary similarity, or pairwise distances -> per-axis percentile masks ->
masked product.

Interface:
  engine = CrossSimilarityMatrix(EngineConfig(embed_dimension=9, kappa=0.095))
  csm = engine.compute(query_hpcp, reference_hpcp)   # (Q, R)

Input chromagrams have shape (frames, numbins); use the HPCP defaults for
best results.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from chroma_crosssim.errors import EmptyResultError, InvalidInputError, InvalidParameterError
from chroma_crosssim.features.config import DEFAULT_CONFIG, MATCH_COEF, MISMATCH_COEF, EngineConfig
from chroma_crosssim.features.embedding import as_feature_matrix, time_embedding
from chroma_crosssim.similarity.binary import chroma_binary_sim_matrix
from chroma_crosssim.similarity.threshold import (
    combine_masks,
    pairwise_distances,
    reference_axis_mask,
    threshold_mask,
)
from chroma_crosssim.transposition.oti import optimal_transposition_index, transpose_chroma

logger = logging.getLogger(__name__)


def check_bins(query: np.ndarray, reference: np.ndarray) -> None:
    """Query and reference frames must have the same number of bins."""
    if query.shape[1] != reference.shape[1]:
        raise InvalidInputError(
            f"query has {query.shape[1]} bins but reference has {reference.shape[1]}"
        )


def transpose_to_query_key(query: np.ndarray, reference: np.ndarray, noti: int) -> np.ndarray:
    """Return a copy of reference rotated by its global OTI against query."""
    oti_idx = optimal_transposition_index(query, reference, noti)
    logger.debug("Global OTI: %d", oti_idx)
    return transpose_chroma(reference, oti_idx)


class CrossSimilarityMatrix:
    """Computes a binary cross-similarity matrix from two chroma feature matrices.

    Two methods:
      - default: Euclidean distances between time-embedded frames,
        thresholded per row from both the query and the reference side
        (cross recurrence plot).
      - oti_binary: per-pair OTI binary similarity.

    Inputs are never modified.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    @classmethod
    def from_options(cls, **options: Any) -> "CrossSimilarityMatrix":
        return cls(EngineConfig.from_options(**options))

    def __call__(self, query_feature, reference_feature) -> np.ndarray:
        return self.compute(query_feature, reference_feature)

    def compute(self, query_feature, reference_feature) -> np.ndarray:
        """Compute the (Q, R) cross-similarity matrix.

        Args:
            query_feature: (frames, numbins) query chromagram.
            reference_feature: (frames, numbins) reference chromagram.

        Returns:
            (Q, R) matrix; Q and R are the embedded frame counts.

        Raises:
            EmptyInputError: if either input has no frames.
            InvalidInputError: on malformed or mismatched inputs.
            EmptyResultError: if the similarity matrix would be empty.
        """
        query = as_feature_matrix(query_feature, "queryFeature")
        reference = as_feature_matrix(reference_feature, "referenceFeature")
        check_bins(query, reference)
        cfg = self.config

        if cfg.oti_binary:
            csm = self._oti_binary(query, reference)
        else:
            csm = self._cross_recurrence(query, reference)

        if csm.size == 0:
            raise EmptyResultError("cross similarity matrix is empty")
        logger.debug("Cross similarity matrix: %s", csm.shape)
        return csm

    def _oti_binary(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray:
        cfg = self.config
        if cfg.to_blocked:
            query = time_embedding(query, cfg.embed_dimension, cfg.tau)
            reference = time_embedding(reference, cfg.embed_dimension, cfg.tau)
        return chroma_binary_sim_matrix(query, reference, cfg.noti, MATCH_COEF, MISMATCH_COEF)

    def _cross_recurrence(self, query: np.ndarray, reference: np.ndarray) -> np.ndarray:
        cfg = self.config
        if cfg.oti:
            reference = transpose_to_query_key(query, reference, cfg.noti)

        embed_query = time_embedding(query, cfg.embed_dimension, cfg.tau)
        embed_reference = time_embedding(reference, cfg.embed_dimension, cfg.tau)

        pdistances = pairwise_distances(embed_query, embed_reference)
        tp_distances = pdistances.T

        if cfg.optimise_threshold is True:
            similarity_x = threshold_mask(pdistances, cfg.kappa, optimise_threshold=True)
        elif cfg.optimise_threshold is False:
            similarity_x = threshold_mask(pdistances, cfg.kappa)
        else:
            raise InvalidParameterError(
                "Invalid type for parameter 'optimiseThreshold', expects bool"
            )

        similarity_y = reference_axis_mask(tp_distances, cfg.kappa)
        return combine_masks(similarity_x, similarity_y)


def cross_similarity_matrix(query_feature, reference_feature, **options: Any) -> np.ndarray:
    """One-shot helper: CrossSimilarityMatrix.from_options(**options).compute(...)."""
    return CrossSimilarityMatrix.from_options(**options).compute(query_feature, reference_feature)
