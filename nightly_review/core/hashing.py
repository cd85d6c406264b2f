"""
Content fingerprints for chunks.
The digest doubles as the change marker and the vector id.
"""

import hashlib


def hash_content(content: str) -> str:
    """
    SHA-256 hex digest of the exact UTF-8 bytes of content.

    No normalization is applied, so whitespace or case edits change the hash.

    Args:
        content: Chunk text, including extractor markers such as '## '

    Returns:
        64 character lowercase hex string
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
