"""Feature matrix validation and time-delay embedding of chroma sequences."""

import numpy as np

from chroma_crosssim.errors import EmptyInputError, InvalidInputError


def as_feature_matrix(features, name: str = "feature") -> np.ndarray:
    """Return features as a float64 (n_frames, n_bins) array.

    Raises:
        EmptyInputError: if there are no frames.
        InvalidInputError: if the input is not a 2-D matrix.
    """
    array = np.asarray(features, dtype=np.float64)
    if array.size == 0:
        raise EmptyInputError(f"input {name} array is empty")
    if array.ndim != 2:
        raise InvalidInputError(
            f"input {name} should have shape (frames, numbins), got {array.shape}"
        )
    return array


def time_embedding(sequence: np.ndarray, m: int, tau: int) -> np.ndarray:
    """Stack m frames spaced tau apart into one delay-coordinate frame.

    Row i of the result is the concatenation of rows i, i+tau, ...,
    i+(m-1)*tau of ``sequence``. The result has ``len(sequence) - m*tau``
    rows. With m == 1 the input is returned as is.

    Args:
        sequence: (n_frames, n_bins) features.
        m: Embedding dimension (number of stacked frames).
        tau: Hop between stacked frames.

    Returns:
        (n_frames - m*tau, n_bins*m) embedded features.
    """
    if m < 1 or tau < 1:
        raise InvalidInputError(f"embedding needs m >= 1 and tau >= 1, got m={m}, tau={tau}")
    if m == 1:
        return sequence

    n_frames, n_bins = sequence.shape
    span = m * tau
    if n_frames < span:
        raise InvalidInputError(
            f"sequence of {n_frames} frames is shorter than the embedding window ({span} frames)"
        )
    n_rows = n_frames - span
    out = np.empty((n_rows, n_bins * m), dtype=sequence.dtype)
    # Fill one stacked block (all rows at once) per delay
    for k in range(m):
        start = k * tau
        out[:, k * n_bins : (k + 1) * n_bins] = sequence[start : start + n_rows]
    return out
