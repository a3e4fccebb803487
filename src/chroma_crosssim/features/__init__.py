"""Engine configuration and chroma feature embedding."""

from chroma_crosssim.features.config import DEFAULT_CONFIG, MATCH_COEF, MISMATCH_COEF, EngineConfig
from chroma_crosssim.features.embedding import as_feature_matrix, time_embedding

__all__ = [
    "DEFAULT_CONFIG",
    "EngineConfig",
    "MATCH_COEF",
    "MISMATCH_COEF",
    "as_feature_matrix",
    "time_embedding",
]
