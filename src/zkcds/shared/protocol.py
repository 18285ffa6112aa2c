"""
Protocol messages exchanged between client and server.

Transport framing is left to the caller; these containers only check that
each field has the shape the other party expects.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional

from zkcds.shared.curve import POINT_LEN, TAG_EVEN, TAG_ODD
from zkcds.shared.errors import InvalidTransitionError, MalformedPointError
from zkcds.shared.utils import PREFIX_LEN


def check_point_bytes(data: bytes, name: str = "point") -> bytes:
    """Structural check of a compressed point; does not verify curve membership."""
    if not isinstance(data, (bytes, bytearray)):
        raise MalformedPointError(f"{name} must be bytes, got {type(data).__name__}")
    data = bytes(data)
    if len(data) != POINT_LEN:
        raise MalformedPointError(f"{name} must be {POINT_LEN} bytes, got {len(data)}")
    if data[0] not in (TAG_EVEN, TAG_ODD):
        raise MalformedPointError(f"{name} has invalid tag 0x{data[0]:02x}")
    return data


def check_prefix(prefix: bytes) -> bytes:
    if not isinstance(prefix, (bytes, bytearray)) or len(prefix) != PREFIX_LEN:
        raise ValueError(f"Prefix must be {PREFIX_LEN} bytes")
    return bytes(prefix)


class QueryState(Enum):
    """Per-query lifecycle."""
    IDLE = "idle"
    REQUESTED = "requested"
    BUCKET_RECEIVED = "bucket_received"
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    RESOLVED = "resolved"


_TRANSITIONS = {
    QueryState.IDLE: {QueryState.REQUESTED},
    QueryState.REQUESTED: {QueryState.BUCKET_RECEIVED},
    QueryState.BUCKET_RECEIVED: {QueryState.MATCHED, QueryState.UNMATCHED},
    QueryState.MATCHED: {QueryState.RESOLVED},
    QueryState.UNMATCHED: set(),
    QueryState.RESOLVED: set(),
}


def advance(current: QueryState, new: QueryState) -> QueryState:
    """Move a query forward, rejecting backward or skipped steps."""
    if new not in _TRANSITIONS[current]:
        raise InvalidTransitionError(f"Cannot go from {current.value} to {new.value}")
    return new


@dataclass(frozen=True)
class LookupRequest:
    """Client -> server: bucket prefix and client-blinded query point."""
    prefix: bytes
    query_point: bytes

    def __post_init__(self):
        object.__setattr__(self, "prefix", check_prefix(self.prefix))
        object.__setattr__(self, "query_point", check_point_bytes(self.query_point, "query_point"))


@dataclass(frozen=True)
class BucketResponse:
    """
    Server -> client: the bucket for the requested prefix and the
    double-blinded query point.
    """
    bucket: Mapping[bytes, bytes]
    double_blinded_point: bytes

    def __post_init__(self):
        object.__setattr__(
            self,
            "double_blinded_point",
            check_point_bytes(self.double_blinded_point, "double_blinded_point"),
        )


@dataclass(frozen=True)
class UnblindRequest:
    """Client -> server: the match with only the server's mask left on it."""
    partially_unblinded_point: bytes

    def __post_init__(self):
        object.__setattr__(
            self,
            "partially_unblinded_point",
            check_point_bytes(self.partially_unblinded_point, "partially_unblinded_point"),
        )


@dataclass
class LookupResult:
    """Outcome of a single lookup."""
    identifier: Optional[uuid.UUID]
    state: QueryState
    timing: Dict[str, float] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.identifier is not None
