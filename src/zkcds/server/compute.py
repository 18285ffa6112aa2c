"""
Server side of the blinded contact discovery lookup.

The server holds a long-lived secret scalar and a table of rows

    prefix(p) -> { H(p) * d_s : encode(u) * d_s * h(p) }

It never sees which phone number a client asked about, only its prefix.
"""
import logging
import random
import uuid
from typing import Callable, Dict, Mapping, Optional

from zkcds.server.index import Bucket, BucketTable, BucketTableBuilder
from zkcds.shared.codec import Identifier, decode_identifier, encode_identifier
from zkcds.shared.config import CDSConfig, DEFAULT_CONFIG
from zkcds.shared.curve import (
    ORDER,
    hash_to_scalar,
    invert_scalar,
    multiply,
    point_to_bytes,
    random_scalar,
)
from zkcds.shared.errors import IdentifierDecodeError, NonInvertibleScalarError
from zkcds.shared.hash_to_curve import hash_to_curve
from zkcds.shared.protocol import BucketResponse, LookupRequest, UnblindRequest
from zkcds.shared.utils import PhoneNumber, Timer, phone_number_bytes, prefix_of, sha256

logger = logging.getLogger(__name__)


def build_bucket_table(
    users: Mapping[PhoneNumber, Identifier],
    secret: int,
    config: CDSConfig = DEFAULT_CONFIG,
) -> BucketTable:
    """
    Blind an enrollment set and group it into buckets by hash prefix.

    This is the offline build phase; it runs the variable-time identifier
    encoding and must not be used on the query path.

    Args:
        users: Phone number -> identifier
        secret: Server secret scalar
        config: Protocol configuration

    Returns:
        Immutable bucket table
    """
    builder = BucketTableBuilder()

    with Timer() as t:
        for phone_number, identifier in users.items():
            digest = sha256(phone_number)

            # sP: the phone number's curve point under the server secret
            s_p = hash_to_curve(phone_number_bytes(phone_number), config.dst) * secret

            # hsU: the identifier point under the server secret, then the hash scalar
            h = hash_to_scalar(digest)
            u_point = encode_identifier(identifier, config.max_encode_attempts)
            hs_u = u_point * (secret * h % ORDER)

            builder.add_row(prefix_of(digest), point_to_bytes(s_p), point_to_bytes(hs_u))

        table = builder.build()

    logger.info(
        "Built bucket table: %d rows in %d buckets (largest %d) in %.0fms",
        table.num_rows, table.num_buckets, table.largest_bucket, t.elapsed_ms,
    )
    return table


class Server:
    """
    Contact discovery server.

    The bucket table is never mutated after construction; a rebuilt table
    can be published with :meth:`swap_table`.
    """

    def __init__(
        self,
        secret: int,
        table: BucketTable,
        config: CDSConfig = DEFAULT_CONFIG,
    ):
        """
        Initialize a server from an already-built table.

        Args:
            secret: Secret scalar the table was blinded with
            table: Bucket table
            config: Protocol configuration
        """
        secret %= ORDER
        if secret == 0:
            raise NonInvertibleScalarError("Server secret must be nonzero")
        self._secret = secret
        self._secret_inv = invert_scalar(secret)
        self._table = table
        self.config = config

    @classmethod
    def from_enrollment(
        cls,
        users: Mapping[PhoneNumber, Identifier],
        entropy: Optional[Callable[[int], bytes]] = None,
        config: CDSConfig = DEFAULT_CONFIG,
    ) -> "Server":
        """
        Create a server with a fresh random secret and blind ``users``.

        Args:
            users: Phone number -> identifier
            entropy: ``os.urandom``-like source for the secret
            config: Protocol configuration
        """
        secret = random_scalar(entropy)
        return cls(secret, build_bucket_table(users, secret, config), config)

    @property
    def table(self) -> BucketTable:
        return self._table

    def build_table(self, users: Mapping[PhoneNumber, Identifier]) -> BucketTable:
        """Blind a new enrollment set under this server's secret."""
        return build_bucket_table(users, self._secret, self.config)

    def swap_table(self, table: BucketTable) -> None:
        """Publish a new table. Callers holding a bucket keep the old one."""
        self._table = table

    def find_bucket(self, prefix: bytes) -> Bucket:
        """
        Get the bucket of blinded rows for a prefix.

        Returns:
            The bucket, empty if no enrolled number has this prefix
        """
        bucket = self._table.find(prefix)
        logger.debug("Bucket %s: %d rows", prefix.hex(), len(bucket))
        return bucket

    def blind_phone_number(self, client_point: bytes) -> bytes:
        """
        Double-blind a client-blinded phone number point.

        Raises:
            MalformedPointError: if ``client_point`` is not a valid point
        """
        return multiply(client_point, self._secret)

    def unblind_user_id(self, point: bytes) -> Optional[uuid.UUID]:
        """
        Remove the server mask from a matched point and decode the identifier.

        Returns:
            The identifier, or None if the point does not carry one

        Raises:
            MalformedPointError: if ``point`` is not a valid point
        """
        u_point = multiply(point, self._secret_inv)
        try:
            return decode_identifier(u_point, strict=self.config.strict_decode)
        except IdentifierDecodeError:
            logger.debug("Unblinded point is not a registered identifier")
            return None

    def handle_request(self, request: LookupRequest) -> BucketResponse:
        """Answer a lookup request with its bucket and the double-blinded point."""
        return BucketResponse(
            bucket=self.find_bucket(request.prefix),
            double_blinded_point=self.blind_phone_number(request.query_point),
        )

    def handle_unblind(self, request: UnblindRequest) -> Optional[uuid.UUID]:
        return self.unblind_user_id(request.partially_unblinded_point)

    def __repr__(self) -> str:
        return f"Server(table={self._table!r})"


def create_mock_enrollment(
    num_users: int,
    seed: Optional[int] = None,
) -> Dict[int, uuid.UUID]:
    """
    Create a synthetic enrollment set for testing.

    Args:
        num_users: Number of distinct phone numbers
        seed: Random seed

    Returns:
        Ten-digit phone number -> random version 4 UUID
    """
    rng = random.Random(seed)
    users: Dict[int, uuid.UUID] = {}
    while len(users) < num_users:
        phone_number = rng.randrange(10 ** 9, 10 ** 10)
        users[phone_number] = uuid.UUID(int=rng.getrandbits(128), version=4)
    return users
