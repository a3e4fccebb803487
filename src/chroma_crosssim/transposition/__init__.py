"""Key transposition of chroma features via the optimal transposition index."""

from chroma_crosssim.transposition.oti import (
    global_average_chroma,
    optimal_transposition_index,
    rotate_bins,
    transpose_chroma,
)

__all__ = [
    "global_average_chroma",
    "optimal_transposition_index",
    "rotate_bins",
    "transpose_chroma",
]
