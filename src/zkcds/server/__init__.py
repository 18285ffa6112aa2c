"""Server-side components for blinded contact discovery."""
from zkcds.server.compute import Server, build_bucket_table, create_mock_enrollment
from zkcds.server.index import Bucket, BucketTable, BucketTableBuilder

__all__ = [
    "Server",
    "build_bucket_table",
    "create_mock_enrollment",
    "Bucket",
    "BucketTable",
    "BucketTableBuilder",
]
