"""Errors raised by the diagnostic pipeline."""


class InvariantViolation(Exception):
    """Raised when a value reaches a lookup table outside its declared domain.

    This is a programming error (a new enum member without a table row),
    never a user error, and must not be defaulted away.
    """


class RecommendationPhrasingError(Exception):
    """Raised when the optional recommendation phrasing call fails or times out."""
