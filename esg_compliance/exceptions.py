"""Errors raised by the compliance engine.

Recoverable data-quality problems are never raised; they come back as
validation alerts. Only the two failure classes below abort a call.
"""


class InputShapeError(ValueError):
    """The call is missing identifiers or got a record it cannot read."""


class ReferenceDataError(LookupError):
    """Unknown framework, broken catalog, or invalid scoring configuration."""
