"""Chroma cross-similarity - time embedding, OTI, similarity scorers, batch and streaming engines."""

from chroma_crosssim.engine import CrossSimilarityMatrix, cross_similarity_matrix
from chroma_crosssim.features.config import EngineConfig

__all__ = ["CrossSimilarityMatrix", "EngineConfig", "cross_similarity_matrix"]
