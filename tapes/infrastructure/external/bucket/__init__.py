from tapes.infrastructure.external.bucket.bucket_client import (
    BucketClient,
    BucketCredentials,
    BucketError,
)

__all__ = ["BucketClient", "BucketCredentials", "BucketError"]
