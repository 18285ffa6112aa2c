"""Shared primitives and protocol definitions."""
from zkcds.shared.codec import decode_identifier, encode_identifier
from zkcds.shared.config import CDSConfig, DEFAULT_CONFIG, DEFAULT_DST
from zkcds.shared.errors import (
    CDSError,
    HashToCurveError,
    IdentifierDecodeError,
    IdentifierEncodeError,
    InvalidTransitionError,
    MalformedPointError,
    NonInvertibleScalarError,
)
from zkcds.shared.hash_to_curve import hash_to_curve
from zkcds.shared.protocol import (
    BucketResponse,
    LookupRequest,
    LookupResult,
    QueryState,
    UnblindRequest,
)
from zkcds.shared.utils import PREFIX_LEN, Timer, derive_prefix, phone_number_bytes

__all__ = [
    "decode_identifier",
    "encode_identifier",
    "CDSConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_DST",
    "CDSError",
    "HashToCurveError",
    "IdentifierDecodeError",
    "IdentifierEncodeError",
    "InvalidTransitionError",
    "MalformedPointError",
    "NonInvertibleScalarError",
    "hash_to_curve",
    "BucketResponse",
    "LookupRequest",
    "LookupResult",
    "QueryState",
    "UnblindRequest",
    "PREFIX_LEN",
    "Timer",
    "derive_prefix",
    "phone_number_bytes",
]
