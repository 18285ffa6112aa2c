"""
Exception hierarchy for the contact discovery core.

A lookup that finds nothing is not an error: it is reported as ``None``.
"""


class CDSError(Exception):
    """Base class for all errors raised by zkcds."""


class MalformedPointError(CDSError, ValueError):
    """Bytes that do not decode to a valid P-256 point."""


class NonInvertibleScalarError(CDSError, ArithmeticError):
    """A scalar congruent to zero was used as a blinding factor."""


class HashToCurveError(CDSError):
    """The hash-to-curve primitive was misconfigured or failed to map."""


class IdentifierEncodeError(CDSError):
    """An identifier could not be embedded into a curve point."""


class IdentifierDecodeError(CDSError):
    """An unblinded point does not carry a registered identifier."""


class InvalidTransitionError(CDSError):
    """A lookup was driven out of order."""
