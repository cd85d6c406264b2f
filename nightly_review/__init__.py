"""
Nightly review: delta summarization of watched documents plus a Slack digest.
"""

from .core.config import VERSION

__version__ = VERSION
