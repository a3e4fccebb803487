"""Optimal transposition index (OTI) of chroma features.

Implements the key-transposition method from:
  Serra, J., Gomez, E., & Herrera, P. (2008). Transposing chroma
  representations to a common key.

Shifts are circular left rotations of the pitch-class bins; the same
direction is used for searching and for applying a shift.
"""

from __future__ import annotations

import numpy as np

from chroma_crosssim.errors import EmptyInputError


def rotate_bins(features: np.ndarray, shift: int) -> np.ndarray:
    """Circularly rotate the last axis left by ``shift`` bins (returns a new array)."""
    return np.roll(features, -shift, axis=-1)


def global_average_chroma(features: np.ndarray) -> np.ndarray:
    """Per-bin sum over all frames, normalized to 0-1 by its maximum.

    An all-zero input gives a zero vector.
    """
    if len(features) == 0:
        raise EmptyInputError("cannot average an empty chroma sequence")
    global_chroma = np.sum(features, axis=0, dtype=np.float64)
    peak = global_chroma.max()
    if peak > 0:
        global_chroma /= peak
    return global_chroma


def optimal_transposition_index(
    query: np.ndarray,
    reference: np.ndarray,
    nshifts: int,
) -> int:
    """Shift in [0, nshifts] that best aligns the reference to the query key.

    Ties resolve to the smallest shift.
    """
    global_query = global_average_chroma(query)
    global_reference = global_average_chroma(reference)
    values = np.array(
        [np.dot(global_query, rotate_bins(global_reference, s)) for s in range(nshifts + 1)]
    )
    return int(np.argmax(values))


def transpose_chroma(features: np.ndarray, shift: int) -> np.ndarray:
    """Rotate every frame of ``features`` by ``shift`` bins into a new array."""
    if shift == 0:
        return features.copy()
    return rotate_bins(features, shift)
