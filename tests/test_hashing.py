"""
Content hashing tests.
"""

import hashlib

from nightly_review.core.hashing import hash_content


def test_hash_is_sha256_hex_of_utf8():
    """Hash is the SHA-256 hex digest of the UTF-8 bytes."""
    content = "Café status: shipped ✓"
    assert hash_content(content) == hashlib.sha256(content.encode("utf-8")).hexdigest()
    assert len(hash_content(content)) == 64


def test_hash_is_deterministic():
    """Same input always yields the same hash."""
    assert hash_content("Status\n* done") == hash_content("Status\n* done")


def test_one_byte_difference_changes_hash():
    """Any byte-level difference produces a different hash."""
    assert hash_content("abc") != hash_content("abd")
    assert hash_content("abc") != hash_content("abc ")
    assert hash_content("abc") != hash_content("ABC")


def test_empty_string_hash():
    """The empty string hashes like any other string."""
    assert hash_content("") == hashlib.sha256(b"").hexdigest()
