"""
Protocol configuration shared by client and server.

Both parties must agree on ``dst``; the other settings only affect
the server.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DST = b"zk-cds-prototype"

# The encode counter must fit in the low byte of the 16-byte counter field
# for strict decoding to accept it.
MAX_COUNTER = 256


class CDSConfig(BaseModel):
    """Settings for a contact discovery deployment."""
    model_config = ConfigDict(frozen=True)

    dst: bytes = Field(
        DEFAULT_DST,
        description="Domain separation tag for hash-to-curve",
    )
    strict_decode: bool = Field(
        True,
        description="Reject unblinded points whose counter suffix could not come from encoding",
    )
    max_encode_attempts: int = Field(
        MAX_COUNTER,
        ge=1,
        le=MAX_COUNTER,
        description="Upper bound on try-and-increment iterations per identifier",
    )

    @field_validator("dst")
    @classmethod
    def _check_dst(cls, value: bytes) -> bytes:
        if not value:
            raise ValueError("dst must not be empty")
        if len(value) > 255:
            raise ValueError(f"dst must be at most 255 bytes, got {len(value)}")
        return value


DEFAULT_CONFIG = CDSConfig()
