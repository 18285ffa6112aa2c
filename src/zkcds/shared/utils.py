"""
Shared utility functions.
"""
import hashlib
import time
from typing import Optional, Union

PhoneNumber = Union[int, str, bytes]

PREFIX_LEN = 8


def phone_number_bytes(phone_number: PhoneNumber) -> bytes:
    """
    Canonical byte form of a phone number.

    Integers are encoded as 8-byte big-endian unsigned values, strings as
    UTF-8, bytes are used as-is.

    Args:
        phone_number: Normalized numeric form, string or raw bytes

    Returns:
        Bytes fed to SHA-256 and hash-to-curve
    """
    if isinstance(phone_number, bool):
        raise TypeError("Phone number must be int, str or bytes, not bool")
    if isinstance(phone_number, int):
        if not 0 <= phone_number < 1 << 64:
            raise ValueError(f"Numeric phone number out of range: {phone_number}")
        return phone_number.to_bytes(8, "big")
    if isinstance(phone_number, str):
        return phone_number.encode("utf-8")
    if isinstance(phone_number, (bytes, bytearray)):
        return bytes(phone_number)
    raise TypeError(f"Unsupported phone number type: {type(phone_number).__name__}")


def sha256(phone_number: PhoneNumber) -> bytes:
    """SHA-256 digest of a phone number's canonical bytes."""
    return hashlib.sha256(phone_number_bytes(phone_number)).digest()


def prefix_of(digest: bytes) -> bytes:
    """Truncate a digest to a bucket prefix."""
    if len(digest) < PREFIX_LEN:
        raise ValueError(f"Digest must be at least {PREFIX_LEN} bytes")
    return digest[:PREFIX_LEN]


def derive_prefix(phone_number: PhoneNumber) -> bytes:
    """Bucket prefix for a phone number."""
    return prefix_of(sha256(phone_number))


class Timer:
    """Context manager measuring wall-clock time."""

    def __init__(self, name: str = "Operation"):
        self.name = name
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.elapsed = time.perf_counter() - self.start_time

    @property
    def elapsed_ms(self) -> float:
        if self.elapsed is None:
            return 0.0
        return self.elapsed * 1000
