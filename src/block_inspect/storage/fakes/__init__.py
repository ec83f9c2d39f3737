# Fake implementations for testing

from .memory_bucket import InMemoryBucket

__all__ = ["InMemoryBucket"]
