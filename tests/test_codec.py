"""Tests for identifier point encoding."""
import uuid

import pytest

from zkcds.shared.codec import decode_identifier, encode_identifier
from zkcds.shared.curve import GENERATOR, point_from_bytes, point_to_bytes
from zkcds.shared.errors import IdentifierDecodeError, IdentifierEncodeError


class TestEncode:
    """Test try-and-increment encoding."""

    @pytest.mark.parametrize(
        "identifier",
        [
            uuid.UUID(int=0),
            uuid.UUID(int=1),
            uuid.UUID("6f1c6a0e-8a4b-4d2f-9a51-1f0e7d3c2b10"),
            uuid.UUID("ffffffff-0000-0000-0000-000000000000"),
        ],
    )
    def test_decode_encode(self, identifier):
        """Test that decoding an encoded identifier gives it back."""
        point = encode_identifier(identifier)
        assert decode_identifier(point) == identifier
        assert decode_identifier(point, strict=True) == identifier

    def test_many_random_identifiers(self):
        """Test encode/decode over many random identifiers."""
        for _ in range(50):
            identifier = uuid.uuid4()
            assert decode_identifier(encode_identifier(identifier), strict=True) == identifier

    def test_deterministic(self):
        """Test that the same identifier always encodes to the same point."""
        identifier = uuid.uuid4()
        assert point_to_bytes(encode_identifier(identifier)) == point_to_bytes(
            encode_identifier(identifier)
        )

    def test_layout(self):
        """Test the tag, identifier and counter layout of an encoded point."""
        identifier = uuid.uuid4()
        data = point_to_bytes(encode_identifier(identifier))

        assert data[0] == 0x02
        assert data[1:17] == identifier.bytes
        # Only the low byte of the little-endian counter may be set
        assert data[18:] == bytes(15)

    def test_point_is_on_curve(self):
        """Test that encoded points decode as valid curve points."""
        data = point_to_bytes(encode_identifier(uuid.uuid4()))
        assert point_to_bytes(point_from_bytes(data)) == data

    def test_raw_bytes(self):
        """Test encoding 16 raw bytes instead of a UUID."""
        raw = bytes(range(16))
        assert decode_identifier(encode_identifier(raw)).bytes == raw

    def test_wrong_length(self):
        """Test error on identifiers that are not 16 bytes."""
        with pytest.raises(IdentifierEncodeError, match="16 bytes"):
            encode_identifier(b"\x01" * 15)

    def test_unencodable_identifier(self):
        """Test error when no counter yields a field element."""
        # x would exceed the field prime for every counter value
        with pytest.raises(IdentifierEncodeError, match="No curve point"):
            encode_identifier(b"\xff" * 16)

    def test_bad_max_attempts(self):
        """Test error on an out-of-range attempt bound."""
        with pytest.raises(ValueError):
            encode_identifier(uuid.uuid4(), max_attempts=0)
        with pytest.raises(ValueError):
            encode_identifier(uuid.uuid4(), max_attempts=257)


class TestDecode:
    """Test identifier extraction."""

    def test_lenient_decode_of_arbitrary_point(self):
        """Test that lenient decoding accepts any point."""
        data = point_to_bytes(GENERATOR)
        assert decode_identifier(GENERATOR) == uuid.UUID(bytes=data[1:17])

    def test_strict_decode_rejects_arbitrary_point(self):
        """Test that strict decoding rejects a point that was never encoded."""
        with pytest.raises(IdentifierDecodeError, match="Counter suffix"):
            decode_identifier(GENERATOR, strict=True)

    def test_decode_bytes(self):
        """Test decoding from compressed bytes."""
        identifier = uuid.uuid4()
        data = point_to_bytes(encode_identifier(identifier))
        assert decode_identifier(data, strict=True) == identifier

    def test_decode_wrong_length(self):
        """Test error on bytes of the wrong length."""
        with pytest.raises(IdentifierDecodeError):
            decode_identifier(b"\x02" * 20)
