"""
Client-side lookup orchestration.

Drives one query through the full exchange:
1. Blind the phone number and send the prefix
2. Receive the bucket and the double-blinded point
3. Match and strip the phone number mask
4. Have the server remove its mask
"""
import logging
import uuid
from typing import Callable, Mapping, Optional

from zkcds.client.crypto import Client
from zkcds.shared.config import CDSConfig, DEFAULT_CONFIG
from zkcds.shared.protocol import (
    BucketResponse,
    LookupRequest,
    LookupResult,
    QueryState,
    UnblindRequest,
    advance,
)
from zkcds.shared.utils import PhoneNumber, Timer

logger = logging.getLogger(__name__)


class LookupClient:
    """
    Runs lookups against a server reached through caller-supplied functions.

    Each lookup uses a fresh :class:`Client`, so one ``LookupClient`` can
    serve concurrent queries.
    """

    def __init__(
        self,
        entropy: Optional[Callable[[int], bytes]] = None,
        config: CDSConfig = DEFAULT_CONFIG,
    ):
        self.entropy = entropy
        self.config = config

    def lookup(
        self,
        phone_number: PhoneNumber,
        request_fn: Callable[[LookupRequest], BucketResponse],
        unblind_fn: Callable[[UnblindRequest], Optional[uuid.UUID]],
    ) -> LookupResult:
        """
        Look up the identifier registered for a phone number.

        Args:
            phone_number: Number to look up
            request_fn: Sends a request, returns the server's bucket response
                        Signature: (LookupRequest) -> BucketResponse
            unblind_fn: Sends the matched point, returns the identifier or None
                        Signature: (UnblindRequest) -> Optional[UUID]

        Returns:
            LookupResult with the identifier (None if not registered), the
            final query state and per-step timing. ``UNMATCHED`` means the
            phone number was not in its bucket; ``RESOLVED`` with no
            identifier means a row matched but the server did not recognise
            the unblinded point as a registered identifier.
        """
        timing = {}
        state = QueryState.IDLE
        client = Client(self.entropy, self.config)

        with Timer() as t:
            request = client.request(phone_number)
        state = advance(state, QueryState.REQUESTED)
        timing["request_ms"] = t.elapsed_ms

        with Timer() as t:
            response = request_fn(request)
        state = advance(state, QueryState.BUCKET_RECEIVED)
        timing["server_bucket_ms"] = t.elapsed_ms

        with Timer() as t:
            match = client.find_user_id(
                response.double_blinded_point, response.bucket, phone_number
            )
        timing["match_ms"] = t.elapsed_ms

        if match is None:
            state = advance(state, QueryState.UNMATCHED)
            logger.debug("Lookup in bucket %s found no match", request.prefix.hex())
            return LookupResult(identifier=None, state=state, timing=_with_total(timing))

        state = advance(state, QueryState.MATCHED)
        with Timer() as t:
            identifier = unblind_fn(UnblindRequest(partially_unblinded_point=match))
        timing["server_unblind_ms"] = t.elapsed_ms
        state = advance(state, QueryState.RESOLVED)

        return LookupResult(identifier=identifier, state=state, timing=_with_total(timing))

    def lookup_many(
        self,
        phone_numbers,
        request_fn: Callable[[LookupRequest], BucketResponse],
        unblind_fn: Callable[[UnblindRequest], Optional[uuid.UUID]],
    ) -> Mapping[PhoneNumber, LookupResult]:
        """Run :meth:`lookup` for each phone number."""
        return {
            phone_number: self.lookup(phone_number, request_fn, unblind_fn)
            for phone_number in phone_numbers
        }


def _with_total(timing: dict) -> dict:
    timing["total_ms"] = sum(timing.values())
    return timing
