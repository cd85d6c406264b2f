"""
Document sources: Markdown files, Google Docs and in-memory documents.
"""

from .source import Block, BlockRole, Document, IDocumentSource, InMemoryDocumentSource, ListStyle

__all__ = [
    'Block',
    'BlockRole',
    'Document',
    'IDocumentSource',
    'InMemoryDocumentSource',
    'ListStyle'
]
