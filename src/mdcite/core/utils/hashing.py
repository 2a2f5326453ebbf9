"""SHA-256 content hashing for content-addressed deduplication"""

import hashlib


CONTENT_ID_LENGTH = 16


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def content_id(content: str) -> str:
    """Return the fixed-width content id: the first 16 hex chars of sha256(content)."""
    return sha256(content)[:CONTENT_ID_LENGTH]
