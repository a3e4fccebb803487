"""Centralized cross-similarity configuration.

Defaults follow the cross-recurrence setup for cover song identification:
- Features: 12-bin HPCP / chroma frames
- Time embedding: 9 stacked frames, hop 1
- Threshold: 9.5th percentile of each row's distances
- Transposition: global OTI over 12 semitone shifts
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, fields
from typing import Any, Dict

from chroma_crosssim.errors import InvalidParameterError

# Coefficients of the OTI-based binary similarity
MATCH_COEF: float = 1.0
MISMATCH_COEF: float = 0.0

# Original option names -> field names
_OPTION_ALIASES: Dict[str, str] = {
    "embedDimension": "embed_dimension",
    "otiBinary": "oti_binary",
    "toBlocked": "to_blocked",
    "optimiseThreshold": "optimise_threshold",
}


@dataclass(frozen=True)
class EngineConfig:
    """Cross-similarity matrix parameters (immutable once built)."""

    # Time-delay embedding
    tau: int = 1  # hop between stacked frames
    embed_dimension: int = 9  # number of stacked frames (m)

    # Percentile threshold, as a fraction of each row
    kappa: float = 0.095

    # Transposition
    noti: int = 12  # number of circular shifts searched
    oti: bool = True  # transpose reference to the query key first

    # Scoring method
    oti_binary: bool = False
    to_blocked: bool = True
    optimise_threshold: bool = False

    def __post_init__(self) -> None:
        for name in ("oti", "oti_binary", "to_blocked", "optimise_threshold"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise InvalidParameterError(
                    f"Invalid type for parameter '{name}', expects bool, got {type(value).__name__}"
                )
        for name, low in (("tau", 1), ("embed_dimension", 1), ("noti", 0)):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidParameterError(f"Parameter '{name}' must be an int")
            value = int(value)
            object.__setattr__(self, name, value)
            if value < low:
                raise InvalidParameterError(f"Parameter '{name}' must be >= {low}, got {value}")
        kappa = self.kappa
        if isinstance(kappa, bool) or not isinstance(kappa, numbers.Real):
            raise InvalidParameterError(f"Parameter 'kappa' must be a real number, got {kappa!r}")
        kappa = float(kappa)
        object.__setattr__(self, "kappa", kappa)
        if not 0.0 <= kappa <= 1.0:
            raise InvalidParameterError(f"Parameter 'kappa' must be in [0, 1], got {self.kappa}")

    @property
    def min_frames_size(self) -> int:
        """Smallest query window that still yields one embedded frame."""
        return self.embed_dimension * self.tau + 1

    @property
    def percentile(self) -> float:
        """kappa expressed on the 0-100 percentile scale."""
        return self.kappa * 100

    @classmethod
    def from_options(cls, **options: Any) -> "EngineConfig":
        """Build from keyword options; accepts camelCase option names too."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise InvalidParameterError(f"Unknown parameter '{key}'")
            kwargs[name] = value
        return cls(**kwargs)


DEFAULT_CONFIG = EngineConfig()
