"""
RFC 9380 hash-to-curve for P-256 (suite ``P256_XMD:SHA-256_SSWU_RO_``).

The same function runs on both client and server, so identical inputs
always map to identical points.
"""
import hashlib

from ecdsa.ellipticcurve import PointJacobi

from zkcds.shared.config import DEFAULT_DST
from zkcds.shared.curve import CURVE, FIELD_PRIME, ORDER
from zkcds.shared.errors import HashToCurveError

# Simplified SWU parameters for P-256
A = CURVE.a() % FIELD_PRIME
B = CURVE.b() % FIELD_PRIME
Z = FIELD_PRIME - 10

# Bytes per field element: ceil((ceil(log2(p)) + k) / 8) with k = 128
L = 48

_B_IN_BYTES = 32
_S_IN_BYTES = 64


def expand_message_xmd(msg: bytes, dst: bytes, len_in_bytes: int) -> bytes:
    """
    Expand ``msg`` into ``len_in_bytes`` uniform bytes using SHA-256.

    Raises:
        HashToCurveError: if the requested length or the DST is out of range
    """
    ell = -(-len_in_bytes // _B_IN_BYTES)
    if ell > 255 or len_in_bytes > 65535:
        raise HashToCurveError(f"Cannot expand to {len_in_bytes} bytes")
    if len(dst) > 255:
        raise HashToCurveError(f"DST must be at most 255 bytes, got {len(dst)}")

    dst_prime = dst + bytes([len(dst)])
    msg_prime = (
        bytes(_S_IN_BYTES)
        + msg
        + len_in_bytes.to_bytes(2, "big")
        + b"\x00"
        + dst_prime
    )
    b_0 = hashlib.sha256(msg_prime).digest()
    b_i = hashlib.sha256(b_0 + b"\x01" + dst_prime).digest()

    uniform = [b_i]
    for i in range(2, ell + 1):
        mixed = bytes(x ^ y for x, y in zip(b_0, b_i))
        b_i = hashlib.sha256(mixed + bytes([i]) + dst_prime).digest()
        uniform.append(b_i)

    return b"".join(uniform)[:len_in_bytes]


def hash_to_field(msg: bytes, count: int, dst: bytes = DEFAULT_DST) -> list:
    """Hash ``msg`` to ``count`` elements of the P-256 base field."""
    uniform = expand_message_xmd(msg, dst, count * L)
    return [
        int.from_bytes(uniform[i * L:(i + 1) * L], "big") % FIELD_PRIME
        for i in range(count)
    ]


def _is_square(x: int) -> bool:
    return pow(x, (FIELD_PRIME - 1) // 2, FIELD_PRIME) in (0, 1)


def _sqrt(x: int) -> int:
    # p = 3 mod 4
    return pow(x, (FIELD_PRIME + 1) // 4, FIELD_PRIME)


def _sgn0(x: int) -> int:
    return x % 2


def _inv0(x: int) -> int:
    return pow(x, FIELD_PRIME - 2, FIELD_PRIME)


def map_to_curve_sswu(u: int) -> PointJacobi:
    """Simplified Shallue-van de Woestijne-Ulas map of a field element."""
    p = FIELD_PRIME
    zu2 = Z * u * u % p

    tv1 = _inv0((zu2 * zu2 + zu2) % p)
    if tv1 == 0:
        x1 = B * _inv0(Z * A % p) % p
    else:
        x1 = (p - B) * _inv0(A) * (1 + tv1) % p
    gx1 = (pow(x1, 3, p) + A * x1 + B) % p

    if _is_square(gx1):
        x, y = x1, _sqrt(gx1)
    else:
        x = zu2 * x1 % p
        gx2 = (pow(x, 3, p) + A * x + B) % p
        y = _sqrt(gx2)

    if _sgn0(u) != _sgn0(y):
        y = p - y

    if (y * y - (pow(x, 3, p) + A * x + B)) % p != 0:
        raise HashToCurveError("SSWU map produced a point off the curve")
    return PointJacobi(CURVE, x, y, 1, ORDER)


def hash_to_curve(msg: bytes, dst: bytes = DEFAULT_DST) -> PointJacobi:
    """
    Hash arbitrary bytes to a uniformly distributed P-256 point.

    Args:
        msg: Input bytes
        dst: Domain separation tag

    Returns:
        Point with no known discrete logarithm

    Raises:
        HashToCurveError: if the DST is invalid or the map degenerates
    """
    if not dst:
        raise HashToCurveError("DST must not be empty")
    u0, u1 = hash_to_field(msg, 2, dst)

    # P-256 has cofactor 1, so clearing the cofactor is the identity
    point = map_to_curve_sswu(u0) + map_to_curve_sswu(u1)
    if not point.y():
        raise HashToCurveError("hash_to_curve produced the identity")
    return point
