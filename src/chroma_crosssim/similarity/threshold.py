"""Percentile-thresholded similarity masks for cross-recurrence plots.

Implements the thresholding of:
  Serra, J., Serra, X., & Andrzejak, R. G. (2009). Cross recurrence
  quantification for cover song identification. New Journal of Physics.

A frame is similar to another when their distance is within the kappa
percentile of its own row. Rows are thresholded separately for each
sequence, so the two axis masks differ in general.
"""

from __future__ import annotations

import numpy as np
from scipy.spatial.distance import cdist

from chroma_crosssim.errors import EmptyResultError


def pairwise_distances(embed_a: np.ndarray, embed_b: np.ndarray) -> np.ndarray:
    """Euclidean distance between every row of embed_a and every row of embed_b."""
    if len(embed_a) == 0 or len(embed_b) == 0:
        raise EmptyResultError("empty array found inside euclidean cross similarity matrix")
    return cdist(embed_a, embed_b, metric="euclidean")


def heaviside(values: np.ndarray) -> np.ndarray:
    """Step function: 1 where values >= 0, else 0."""
    return (values >= 0).astype(np.float64)


def threshold_mask(
    distances: np.ndarray,
    kappa: float,
    optimise_threshold: bool = False,
) -> np.ndarray:
    """Row-wise percentile threshold of a distance matrix.

    Args:
        distances: (rows, cols) distances.
        kappa: Fraction in [0, 1]; each row keeps entries up to its
            kappa*100 percentile (entries on the threshold are kept).
        optimise_threshold: Skip thresholding and return all ones.

    Returns:
        (rows, cols) mask of 0 / 1.
    """
    if optimise_threshold:
        return np.ones_like(distances, dtype=np.float64)
    thresholds = np.percentile(distances, kappa * 100, axis=1, keepdims=True)
    return heaviside(thresholds - distances)


def binarize_transpose(similarity: np.ndarray) -> np.ndarray:
    """Binarize with the step function and transpose in a single pass."""
    return np.ascontiguousarray((similarity.T >= 0).astype(np.float64))


def reference_axis_mask(tp_distances: np.ndarray, kappa: float) -> np.ndarray:
    """Threshold the transposed (ref, query) distances from the reference side.

    Returns the binary mask already transposed back to (query, ref).
    """
    thresholds = np.percentile(tp_distances, kappa * 100, axis=1, keepdims=True)
    return binarize_transpose(thresholds - tp_distances)


def combine_masks(similarity_x: np.ndarray, similarity_y: np.ndarray) -> np.ndarray:
    """Masked product of the query-axis and reference-axis masks.

    Both masks are real (query, ref) matrices; with 0/1 masks the product is
    a logical AND, other coefficients pass through as weights.
    """
    if similarity_x.shape != similarity_y.shape:
        raise ValueError(
            f"mask shapes differ: {similarity_x.shape} vs {similarity_y.shape}"
        )
    return np.multiply(similarity_x, similarity_y)
