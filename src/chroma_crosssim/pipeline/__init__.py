"""Streaming cross-similarity: ports, node and cooperative scheduler."""

from chroma_crosssim.pipeline.node import NodeStatus, StreamingCrossSimilarity
from chroma_crosssim.pipeline.ports import AcquireResult, FrameBuffer, TokenBuffer
from chroma_crosssim.pipeline.streaming_loop import StreamingConfig, StreamingCrossSimilarityPipeline

__all__ = [
    "AcquireResult",
    "FrameBuffer",
    "NodeStatus",
    "StreamingConfig",
    "StreamingCrossSimilarity",
    "StreamingCrossSimilarityPipeline",
    "TokenBuffer",
]
