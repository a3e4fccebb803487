"""Binary (OTI) and percentile-thresholded similarity scorers."""

from chroma_crosssim.similarity.binary import chroma_binary_sim_matrix, make_scratch, shift_stack
from chroma_crosssim.similarity.threshold import (
    binarize_transpose,
    combine_masks,
    pairwise_distances,
    reference_axis_mask,
    threshold_mask,
)

__all__ = [
    "binarize_transpose",
    "chroma_binary_sim_matrix",
    "combine_masks",
    "make_scratch",
    "pairwise_distances",
    "reference_axis_mask",
    "shift_stack",
    "threshold_mask",
]
