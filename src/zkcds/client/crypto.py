"""
Client-side blinding operations.
"""
import logging
from typing import Callable, Mapping, Optional, Tuple

from zkcds.shared.config import CDSConfig, DEFAULT_CONFIG
from zkcds.shared.curve import (
    hash_to_scalar,
    invert_scalar,
    multiply,
    point_to_bytes,
    random_scalar,
)
from zkcds.shared.hash_to_curve import hash_to_curve
from zkcds.shared.protocol import LookupRequest
from zkcds.shared.utils import PhoneNumber, phone_number_bytes, prefix_of, sha256

logger = logging.getLogger(__name__)


class Client:
    """
    Client half of the lookup.

    Holds a secret scalar chosen at construction. The same instance must
    make the request and process the reply for a given phone number; use
    one instance per in-flight query.
    """

    def __init__(
        self,
        entropy: Optional[Callable[[int], bytes]] = None,
        config: CDSConfig = DEFAULT_CONFIG,
    ):
        """
        Initialize a client with a fresh secret.

        Args:
            entropy: ``os.urandom``-like source, defaults to the OS CSPRNG
            config: Protocol configuration (only ``dst`` matters here)
        """
        self._secret = random_scalar(entropy)
        self._secret_inv = invert_scalar(self._secret)
        self.config = config

    def request_phone_number(self, phone_number: PhoneNumber) -> Tuple[bytes, bytes]:
        """
        Start a lookup.

        Args:
            phone_number: Number to look up

        Returns:
            Tuple of (prefix, client-blinded phone number point)
        """
        digest = sha256(phone_number)
        c_p = hash_to_curve(phone_number_bytes(phone_number), self.config.dst) * self._secret
        return prefix_of(digest), point_to_bytes(c_p)

    def request(self, phone_number: PhoneNumber) -> LookupRequest:
        prefix, query_point = self.request_phone_number(phone_number)
        return LookupRequest(prefix=prefix, query_point=query_point)

    def find_user_id(
        self,
        double_blinded_point: bytes,
        bucket: Mapping[bytes, bytes],
        phone_number: PhoneNumber,
    ) -> Optional[bytes]:
        """
        Look for the phone number in a bucket and strip the hash mask.

        Args:
            double_blinded_point: Server's blinding of our request point
            bucket: Rows returned by the server for our prefix
            phone_number: The number passed to :meth:`request_phone_number`

        Returns:
            The identifier point still blinded by the server secret, or None
            if the phone number is not in the bucket

        Raises:
            MalformedPointError: if a point does not decode
        """
        # Removing our mask leaves the server's point for this phone number
        s_p = multiply(double_blinded_point, self._secret_inv)

        hs_u = bucket.get(s_p)
        if hs_u is None:
            logger.debug("No match in bucket of %d rows", len(bucket))
            return None

        h = hash_to_scalar(sha256(phone_number))
        return multiply(hs_u, invert_scalar(h))

    def __repr__(self) -> str:
        return "Client()"
