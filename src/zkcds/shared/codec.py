"""
Embedding of 128-bit identifiers into P-256 points.

The candidate encoding is ``tag || identifier (16 bytes) || counter (16 bytes,
little-endian)``; the counter is incremented until the candidate decodes.
Encoding is variable time and must only run while building the bucket table.
"""
import uuid
from typing import Union

from ecdsa.ellipticcurve import PointJacobi

from zkcds.shared.config import MAX_COUNTER
from zkcds.shared.curve import TAG_EVEN, point_from_bytes, point_to_bytes
from zkcds.shared.errors import (
    IdentifierDecodeError,
    IdentifierEncodeError,
    MalformedPointError,
)

IDENTIFIER_LEN = 16
COUNTER_LEN = 16

Identifier = Union[uuid.UUID, bytes]


def _identifier_bytes(identifier: Identifier) -> bytes:
    if isinstance(identifier, uuid.UUID):
        return identifier.bytes
    identifier = bytes(identifier)
    if len(identifier) != IDENTIFIER_LEN:
        raise IdentifierEncodeError(
            f"Identifier must be {IDENTIFIER_LEN} bytes, got {len(identifier)}"
        )
    return identifier


def encode_identifier(identifier: Identifier, max_attempts: int = MAX_COUNTER) -> PointJacobi:
    """
    Encode an identifier as a curve point by try-and-increment.

    Args:
        identifier: UUID or 16 raw bytes
        max_attempts: Number of counter values to try

    Returns:
        Point whose x coordinate starts with the identifier bytes

    Raises:
        IdentifierEncodeError: if no counter below ``max_attempts`` works
    """
    if not 1 <= max_attempts <= MAX_COUNTER:
        raise ValueError(f"max_attempts must be in [1, {MAX_COUNTER}]")
    raw = _identifier_bytes(identifier)

    for counter in range(max_attempts):
        candidate = bytes([TAG_EVEN]) + raw + counter.to_bytes(COUNTER_LEN, "little")
        try:
            point = point_from_bytes(candidate)
        except MalformedPointError:
            continue
        return point

    raise IdentifierEncodeError(
        f"No curve point found for identifier within {max_attempts} attempts"
    )


def decode_identifier(point: Union[PointJacobi, bytes], strict: bool = False) -> uuid.UUID:
    """
    Recover the identifier from an encoded point.

    Without ``strict`` any point decodes to some 16 bytes. With ``strict`` the
    counter suffix must be one :func:`encode_identifier` could have produced.

    Raises:
        IdentifierDecodeError: if ``strict`` and the counter suffix is out of range
    """
    data = point if isinstance(point, (bytes, bytearray)) else point_to_bytes(point)
    data = bytes(data)
    if len(data) != 1 + IDENTIFIER_LEN + COUNTER_LEN:
        raise IdentifierDecodeError(f"Unexpected point length {len(data)}")

    if strict and any(data[1 + IDENTIFIER_LEN + 1:]):
        raise IdentifierDecodeError("Counter suffix is not a valid encoding counter")

    return uuid.UUID(bytes=data[1:1 + IDENTIFIER_LEN])
