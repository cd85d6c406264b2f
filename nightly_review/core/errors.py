"""
Error taxonomy for the nightly review pipeline.

These exceptions are raised inside adapters and caught at their public
methods, where they are logged and turned into failure sentinels. Only
DocumentNotFoundError crosses a component boundary: DocumentSource.open
raises it and the summarizer handles it.
"""


class NightlyReviewError(Exception):
    """Base class for pipeline errors."""


class ConfigError(NightlyReviewError):
    """Required credentials or settings for a collaborator are missing."""


class RetrievalError(NightlyReviewError):
    """A document, store or provider was unreachable or returned a non-success status."""


class DocumentNotFoundError(RetrievalError):
    """The document does not exist or the caller lacks permission to open it."""

    def __init__(self, document_id: str, reason: str = "not found"):
        super().__init__(f"Document '{document_id}' could not be opened: {reason}")
        self.document_id = document_id
        self.reason = reason


class ParseError(NightlyReviewError):
    """A provider response was malformed or had an unexpected shape."""
