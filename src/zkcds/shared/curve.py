"""
P-256 group and scalar field helpers backed by python-ecdsa.

All points that leave this module are 33-byte SEC1 compressed encodings.
"""
from typing import Callable, Optional

from ecdsa import NIST256p
from ecdsa.ellipticcurve import INFINITY, PointJacobi
from ecdsa.errors import MalformedPointError as EcdsaMalformedPointError
from ecdsa.numbertheory import SquareRootError, inverse_mod
from ecdsa.util import randrange

from zkcds.shared.errors import MalformedPointError, NonInvertibleScalarError

CURVE = NIST256p.curve
GENERATOR = NIST256p.generator
ORDER = NIST256p.order
FIELD_PRIME = CURVE.p()

POINT_LEN = 33
COORD_LEN = 32
TAG_EVEN = 0x02
TAG_ODD = 0x03


def random_scalar(entropy: Optional[Callable[[int], bytes]] = None) -> int:
    """
    Sample a uniform nonzero scalar.

    Args:
        entropy: ``os.urandom``-like source, defaults to the OS CSPRNG

    Returns:
        Integer in ``[1, ORDER)``
    """
    scalar = 0
    while scalar % ORDER == 0:
        scalar = randrange(ORDER, entropy)
    return scalar


def invert_scalar(scalar: int) -> int:
    """Multiplicative inverse modulo the group order."""
    scalar %= ORDER
    if scalar == 0:
        raise NonInvertibleScalarError("zero scalar has no inverse")
    return inverse_mod(scalar, ORDER)


def hash_to_scalar(digest: bytes) -> int:
    """Reduce a hash digest to a nonzero scalar in ``[1, ORDER)``."""
    return int.from_bytes(digest, "big") % (ORDER - 1) + 1


def point_from_bytes(data: bytes) -> PointJacobi:
    """
    Decode a compressed point.

    Raises:
        MalformedPointError: if ``data`` is not a valid compressed P-256 point
    """
    data = bytes(data)
    if len(data) != POINT_LEN:
        raise MalformedPointError(f"Expected {POINT_LEN} bytes, got {len(data)}")
    if data[0] not in (TAG_EVEN, TAG_ODD):
        raise MalformedPointError(f"Invalid tag byte: 0x{data[0]:02x}")
    if int.from_bytes(data[1:], "big") >= FIELD_PRIME:
        raise MalformedPointError("x coordinate is not a field element")

    try:
        return PointJacobi.from_bytes(
            CURVE, data, valid_encodings=("compressed",), order=ORDER
        )
    except (EcdsaMalformedPointError, SquareRootError) as e:
        raise MalformedPointError(f"Not a point on P-256: {e}") from e


def point_to_bytes(point: PointJacobi) -> bytes:
    """Encode a point in compressed form."""
    if point == INFINITY:
        raise MalformedPointError("Cannot encode the point at infinity")
    return point.to_bytes("compressed")


def multiply(data: bytes, scalar: int) -> bytes:
    """Decode ``data``, multiply it by ``scalar`` and re-encode the result."""
    return point_to_bytes(point_from_bytes(data) * (scalar % ORDER))
