"""Object Lock storage adapters."""

from .base import ObjectLockStorage, ServiceError
from .memory import InMemoryObjectLockStorage
from .s3 import S3ObjectLockStorage

__all__ = [
    "ObjectLockStorage",
    "ServiceError",
    "InMemoryObjectLockStorage",
    "S3ObjectLockStorage",
]
