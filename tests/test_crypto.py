"""Tests for scalar and point operations and the blinding parties."""
import random
import uuid

import pytest

from zkcds.client.crypto import Client
from zkcds.server.compute import Server
from zkcds.server.index import BucketTable
from zkcds.shared.config import CDSConfig
from zkcds.shared.curve import (
    GENERATOR,
    ORDER,
    hash_to_scalar,
    invert_scalar,
    multiply,
    point_from_bytes,
    point_to_bytes,
    random_scalar,
)
from zkcds.shared.errors import MalformedPointError, NonInvertibleScalarError
from zkcds.shared.utils import derive_prefix


class TestScalars:
    """Test scalar sampling and inversion."""

    def test_random_scalar_range(self):
        """Test that sampled scalars are nonzero and below the order."""
        for _ in range(20):
            scalar = random_scalar()
            assert 1 <= scalar < ORDER

    def test_random_scalar_seeded(self):
        """Test that a seeded entropy source gives reproducible scalars."""
        a = random_scalar(random.Random(5).randbytes)
        b = random_scalar(random.Random(5).randbytes)
        assert a == b

    def test_invert(self):
        """Test scalar inversion."""
        scalar = random_scalar()
        assert scalar * invert_scalar(scalar) % ORDER == 1

    def test_invert_zero(self):
        """Test error when inverting zero."""
        with pytest.raises(NonInvertibleScalarError, match="zero"):
            invert_scalar(0)
        with pytest.raises(NonInvertibleScalarError):
            invert_scalar(ORDER)

    def test_hash_to_scalar_nonzero(self):
        """Test that hash reduction never yields zero."""
        assert hash_to_scalar(bytes(32)) == 1
        assert hash_to_scalar((ORDER - 1).to_bytes(32, "big")) == 1
        assert 1 <= hash_to_scalar(b"\xff" * 32) < ORDER


class TestPoints:
    """Test compressed point encoding."""

    def test_generator_encoding(self):
        """Test compressed encoding of the generator."""
        data = point_to_bytes(GENERATOR)
        assert len(data) == 33
        assert data.hex() == (
            "03"
            "6b17d1f2e12c4247f8bce6e563a440f277037d812deb33a0f4a13945d898c296"
        )
        assert point_to_bytes(point_from_bytes(data)) == data

    def test_blind_unblind_inverse(self):
        """Test that unblinding by the inverse scalar restores the point."""
        for k in [1, 2, 12345, ORDER - 1]:
            data = point_to_bytes(GENERATOR * k)
            d = random_scalar()
            assert multiply(multiply(data, d), invert_scalar(d)) == data

    def test_blinding_commutes(self):
        """Test that blinding order does not matter."""
        data = point_to_bytes(GENERATOR * 777)
        a, b = random_scalar(), random_scalar()
        assert multiply(multiply(data, a), b) == multiply(multiply(data, b), a)

    @pytest.mark.parametrize(
        "data, message",
        [
            (b"\x02" * 10, "Expected 33 bytes"),
            (b"", "Expected 33 bytes"),
            (b"\x04" + bytes(32), "Invalid tag"),
            (b"\x00" + bytes(32), "Invalid tag"),
            (b"\x02" + b"\xff" * 32, "not a field element"),
        ],
    )
    def test_malformed(self, data, message):
        """Test rejection of malformed point encodings."""
        with pytest.raises(MalformedPointError, match=message):
            point_from_bytes(data)

    def test_malformed_is_value_error(self):
        """Test that malformed points raise a ValueError."""
        with pytest.raises(ValueError):
            point_from_bytes(b"junk")


class TestServer:
    """Test server operations in isolation."""

    def test_zero_secret_rejected(self):
        """Test error on a zero server secret."""
        with pytest.raises(NonInvertibleScalarError):
            Server(0, BucketTable())
        with pytest.raises(NonInvertibleScalarError):
            Server(ORDER, BucketTable())

    def test_find_bucket_missing(self):
        """Test that an unknown prefix gives an empty bucket."""
        server = Server.from_enrollment({"123-456-7890": uuid.uuid4()})
        assert len(server.find_bucket(derive_prefix("555-000-0000"))) == 0

    def test_find_bucket_bad_prefix(self):
        """Test error on a prefix of the wrong length."""
        server = Server.from_enrollment({})
        with pytest.raises(ValueError, match="8 bytes"):
            server.find_bucket(b"short")

    def test_blind_phone_number_malformed(self):
        """Test error when blinding a malformed point."""
        server = Server.from_enrollment({})
        with pytest.raises(MalformedPointError):
            server.blind_phone_number(b"\x02" + b"\xff" * 32)

    def test_blind_phone_number(self):
        """Test that blinding multiplies by the server secret."""
        secret = random_scalar()
        server = Server(secret, BucketTable())
        data = point_to_bytes(GENERATOR * 99)
        assert server.blind_phone_number(data) == point_to_bytes(GENERATOR * (99 * secret % ORDER))

    def test_unblind_unrelated_point(self):
        """Test that strict unblinding rejects an unrelated point."""
        server = Server.from_enrollment({})
        assert server.unblind_user_id(point_to_bytes(GENERATOR * 12345)) is None

    def test_unblind_unrelated_point_lenient(self):
        """Test that lenient unblinding returns the raw bytes of an unrelated point."""
        secret = random_scalar()
        server = Server(secret, BucketTable(), CDSConfig(strict_decode=False))
        expected = point_to_bytes(GENERATOR * (12345 * invert_scalar(secret) % ORDER))

        user_id = server.unblind_user_id(point_to_bytes(GENERATOR * 12345))

        assert user_id == uuid.UUID(bytes=expected[1:17])

    def test_unblind_malformed(self):
        """Test error when unblinding a malformed point."""
        server = Server.from_enrollment({})
        with pytest.raises(MalformedPointError):
            server.unblind_user_id(b"\x05" + bytes(32))

    def test_repr_hides_secret(self):
        """Test that the server repr does not show the secret."""
        secret = random_scalar()
        server = Server(secret, BucketTable())
        assert str(secret) not in repr(server)
        assert hex(secret)[2:] not in repr(server)


class TestClient:
    """Test client operations in isolation."""

    def test_request_shape(self):
        """Test the prefix and point returned by a request."""
        prefix, point = Client().request_phone_number("123-456-7890")
        assert prefix == derive_prefix("123-456-7890")
        assert len(point) == 33
        assert point[0] in (2, 3)

    def test_request_is_blinded(self):
        """Test that two clients blind the same number differently."""
        _, a = Client().request_phone_number("123-456-7890")
        _, b = Client().request_phone_number("123-456-7890")
        assert a != b

    def test_seeded_client_is_deterministic(self):
        """Test that seeded clients produce the same request."""
        _, a = Client(random.Random(9).randbytes).request_phone_number("123-456-7890")
        _, b = Client(random.Random(9).randbytes).request_phone_number("123-456-7890")
        assert a == b

    def test_request_message(self):
        """Test building a LookupRequest."""
        request = Client().request("123-456-7890")
        assert request.prefix == derive_prefix("123-456-7890")

    def test_find_user_id_empty_bucket(self):
        """Test that an empty bucket gives no match."""
        client = Client()
        _, c_p = client.request_phone_number("123-456-7890")
        assert client.find_user_id(c_p, {}, "123-456-7890") is None

    def test_find_user_id_malformed(self):
        """Test error on a malformed double-blinded point."""
        with pytest.raises(MalformedPointError):
            Client().find_user_id(b"\x02" * 5, {}, "123-456-7890")
