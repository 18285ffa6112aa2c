"""
Prefix-bucketed index of blinded rows.

Two levels:
1. ``BucketTable`` - prefix -> ``Bucket``
2. ``Bucket`` - blinded phone number point -> blinded identifier point

Keys are compared as exact compressed-point bytes. Tables are built once by
``BucketTableBuilder`` and are read-only afterwards, so they can be shared
between threads without locking.
"""
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterator, Optional

from zkcds.shared.protocol import check_point_bytes, check_prefix


class Bucket(Mapping):
    """
    Read-only rows sharing one prefix.

    Rows from different phone numbers that collide on the prefix are told
    apart only by their point key.
    """

    __slots__ = ("_rows",)

    def __init__(self, rows: Optional[Dict[bytes, bytes]] = None):
        self._rows = MappingProxyType(dict(rows or {}))

    @classmethod
    def empty(cls) -> "Bucket":
        return _EMPTY_BUCKET

    def __getitem__(self, key: bytes) -> bytes:
        if not isinstance(key, (bytes, bytearray)):
            raise KeyError(key)
        return self._rows[bytes(key)]

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"Bucket(rows={len(self._rows)})"


_EMPTY_BUCKET = Bucket()


class BucketTable(Mapping):
    """Read-only mapping from prefix to bucket."""

    __slots__ = ("_buckets",)

    def __init__(self, buckets: Optional[Dict[bytes, Bucket]] = None):
        self._buckets = MappingProxyType(dict(buckets or {}))

    def find(self, prefix: bytes) -> Bucket:
        """
        Get the bucket for a prefix.

        Args:
            prefix: 8-byte hash prefix

        Returns:
            The bucket, or the empty bucket if no row has this prefix
        """
        return self._buckets.get(check_prefix(prefix), _EMPTY_BUCKET)

    def __getitem__(self, prefix: bytes) -> Bucket:
        return self._buckets[prefix]

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    @property
    def num_buckets(self) -> int:
        return len(self._buckets)

    @property
    def num_rows(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    @property
    def largest_bucket(self) -> int:
        return max((len(bucket) for bucket in self._buckets.values()), default=0)

    def __repr__(self) -> str:
        return f"BucketTable(buckets={self.num_buckets}, rows={self.num_rows})"


class BucketTableBuilder:
    """
    Mutable staging area for the offline build phase.

    Call :meth:`build` once all rows are added to get an immutable table.
    """

    def __init__(self):
        self._rows: Dict[bytes, Dict[bytes, bytes]] = {}

    def add_row(self, prefix: bytes, key: bytes, value: bytes) -> None:
        """
        Add one blinded row.

        Args:
            prefix: 8-byte hash prefix
            key: Server-blinded phone number point
            value: Blinded identifier point

        Raises:
            ValueError: on a duplicate key within the same prefix
        """
        prefix = check_prefix(prefix)
        key = check_point_bytes(key, "key")
        value = check_point_bytes(value, "value")

        bucket = self._rows.setdefault(prefix, {})
        if key in bucket:
            raise ValueError(f"Duplicate point key in bucket {prefix.hex()}")
        bucket[key] = value

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._rows.values())

    def build(self) -> BucketTable:
        """Freeze the staged rows."""
        return BucketTable({
            prefix: Bucket(rows) for prefix, rows in self._rows.items()
        })
