"""Chroma binary similarity based on per-frame OTI.

Implements the binary similarity of:
  Serra, J., et al. (2008). Chroma binary similarity and local alignment
  applied to cover song identification. IEEE TASLP 16(6).

Two frames match when the circular shift that best aligns them is 0 or 1
semitone.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from chroma_crosssim.features.config import MATCH_COEF, MISMATCH_COEF
from chroma_crosssim.transposition.oti import rotate_bins

# OTI values (in bins) accepted as the same key
MATCH_SHIFTS = (0, 1)


def make_scratch(nshifts: int, n_frames: int) -> np.ndarray:
    """Allocate the per-row shift score buffer used by chroma_binary_sim_matrix."""
    return np.empty((nshifts + 1, n_frames), dtype=np.float64)


def shift_stack(chroma_b: np.ndarray, nshifts: int) -> np.ndarray:
    """(nshifts + 1, M, D) array holding every shift of every frame of chroma_b."""
    return np.stack([rotate_bins(chroma_b, k) for k in range(nshifts + 1)])


def chroma_binary_sim_matrix(
    chroma_a: np.ndarray,
    chroma_b: np.ndarray,
    nshifts: int,
    match_coef: float = MATCH_COEF,
    mismatch_coef: float = MISMATCH_COEF,
    scratch: Optional[np.ndarray] = None,
    shifted_b: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Binary similarity of every frame of chroma_a against every frame of chroma_b.

    Args:
        chroma_a: (N, D) frames (rows of the result).
        chroma_b: (M, D) frames (columns of the result).
        nshifts: Largest circular shift searched for each pair.
        match_coef: Value for pairs whose OTI is 0 or 1.
        mismatch_coef: Value for every other pair.
        scratch: Optional (nshifts + 1, M) buffer reused for every row;
            allocated once when omitted.
        shifted_b: Optional precomputed shift_stack(chroma_b, nshifts), for
            callers scoring many query blocks against the same chroma_b.

    Returns:
        (N, M) matrix of match_coef / mismatch_coef.
    """
    n_b = len(chroma_b)
    if scratch is None:
        scratch = make_scratch(nshifts, n_b)
    elif scratch.shape != (nshifts + 1, n_b):
        raise ValueError(
            f"scratch must have shape {(nshifts + 1, n_b)}, got {scratch.shape}"
        )

    if shifted_b is None:
        shifted_b = shift_stack(chroma_b, nshifts)
    elif shifted_b.shape[:2] != (nshifts + 1, n_b):
        raise ValueError(
            f"shifted_b must start with shape {(nshifts + 1, n_b)}, got {shifted_b.shape}"
        )

    sim = np.full((len(chroma_a), n_b), mismatch_coef, dtype=np.float64)
    for i, frame in enumerate(chroma_a):
        np.matmul(shifted_b, frame, out=scratch)
        # argmax keeps the first maximum, so ties go to the smallest shift
        oti = np.argmax(scratch, axis=0)
        sim[i, np.isin(oti, MATCH_SHIFTS)] = match_coef
    return sim
