"""Exceptions raised by the cross-similarity engines.

All of them derive from ValueError so callers that already guard feature
validation with ``except ValueError`` keep working.
"""


class CrossSimilarityError(ValueError):
    """Base class for cross-similarity failures."""


class EmptyInputError(CrossSimilarityError):
    """Query or reference feature matrix has no frames."""


class EmptyResultError(CrossSimilarityError):
    """An intermediate or final similarity matrix came out empty."""


class InvalidParameterError(CrossSimilarityError):
    """A configuration option is out of range or of the wrong type."""


class InvalidInputError(CrossSimilarityError):
    """Feature matrix is malformed or too short for the embedding window."""
