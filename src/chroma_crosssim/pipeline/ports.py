"""Streaming ports: FIFO buffers with acquire/release sizes.

A node may run once its input holds ``acquire_size`` tokens; after a run it
drops ``release_size`` tokens from the front. Producers close a port to
signal end of stream.
"""

from __future__ import annotations

import enum
from collections import deque
from typing import Any, Deque, List, Optional

import numpy as np


class AcquireResult(enum.Enum):
    AVAILABLE = "available"
    INSUFFICIENT = "insufficient"
    END_OF_STREAM = "end_of_stream"


class FrameBuffer:
    """Ring buffer of fixed-width feature frames for a streaming input.

    Storage grows (doubling) when a push would overflow, so producers never
    block; frames are returned in arrival order.
    """

    def __init__(
        self,
        acquire_size: int = 1,
        release_size: int = 1,
        capacity: int = 64,
        dtype: type = np.float64,
    ):
        self.acquire_size = acquire_size
        self.release_size = release_size
        self.dtype = dtype
        self._capacity = max(1, capacity)
        self._data: Optional[np.ndarray] = None
        self._read_idx = 0
        self._count = 0
        self._closed = False

    @property
    def available(self) -> int:
        """Number of buffered frames."""
        return self._count

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def width(self) -> Optional[int]:
        """Frame width, known after the first push."""
        return None if self._data is None else self._data.shape[1]

    def push(self, frames: np.ndarray) -> None:
        """Append one frame (n_bins,) or a block of frames (n, n_bins)."""
        if self._closed:
            raise ValueError("cannot push to a closed stream")
        frames = np.asarray(frames, dtype=self.dtype)
        if frames.ndim == 1:
            frames = frames[None, :]
        n = len(frames)
        if n == 0:
            return
        if self._data is None:
            self._data = np.zeros((self._capacity, frames.shape[1]), dtype=self.dtype)
        elif frames.shape[1] != self._data.shape[1]:
            raise ValueError(
                f"frame width {frames.shape[1]} does not match stream width {self._data.shape[1]}"
            )
        if self._count + n > self._capacity:
            self._grow(self._count + n)

        size = self._capacity
        start = (self._read_idx + self._count) % size
        end = start + n
        if end <= size:
            self._data[start:end] = frames
        else:
            head = size - start
            self._data[start:] = frames[:head]
            self._data[: end - size] = frames[head:]
        self._count += n

    def _grow(self, needed: int) -> None:
        capacity = self._capacity
        while capacity < needed:
            capacity *= 2
        data = np.zeros((capacity, self._data.shape[1]), dtype=self.dtype)
        data[: self._count] = self.peek(self._count)
        self._data = data
        self._capacity = capacity
        self._read_idx = 0

    def close(self) -> None:
        """Signal that no more frames will be pushed."""
        self._closed = True

    def try_acquire(self, n: Optional[int] = None) -> AcquireResult:
        """Check whether n (default acquire_size) frames can be acquired."""
        n = self.acquire_size if n is None else n
        if self._count >= n:
            return AcquireResult.AVAILABLE
        if self._closed:
            return AcquireResult.END_OF_STREAM
        return AcquireResult.INSUFFICIENT

    def peek(self, n: int) -> np.ndarray:
        """Return a copy of the first n frames in arrival order."""
        n = min(n, self._count)
        if self._data is None or n == 0:
            return np.zeros((0, self.width or 0), dtype=self.dtype)
        idx = (self._read_idx + np.arange(n)) % self._capacity
        return self._data[idx]

    def tokens(self) -> np.ndarray:
        """The acquired window: first acquire_size frames."""
        return self.peek(self.acquire_size)

    def release(self, n: Optional[int] = None) -> None:
        """Drop n (default release_size) frames from the front."""
        n = min(self.release_size if n is None else n, self._count)
        self._read_idx = (self._read_idx + n) % self._capacity
        self._count -= n

    def clear(self) -> None:
        """Reset buffer and reopen the stream."""
        self._read_idx = 0
        self._count = 0
        self._closed = False


class TokenBuffer:
    """FIFO of arbitrary tokens (e.g. matrices) for a node output."""

    def __init__(self, acquire_size: int = 1, release_size: int = 1):
        self.acquire_size = acquire_size
        self.release_size = release_size
        self._tokens: Deque[Any] = deque()

    @property
    def available(self) -> int:
        return len(self._tokens)

    def push(self, token: Any) -> None:
        self._tokens.append(token)

    def pop(self) -> Any:
        return self._tokens.popleft()

    def drain(self) -> List[Any]:
        """Remove and return all buffered tokens."""
        out = list(self._tokens)
        self._tokens.clear()
        return out

    def clear(self) -> None:
        self._tokens.clear()
