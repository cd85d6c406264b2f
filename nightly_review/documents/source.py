"""
Document source interface and the block model it yields.
A document is an ordered list of blocks, each tagged with a structural role.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..core.errors import DocumentNotFoundError, ParseError


class BlockRole(str, Enum):
    """Structural role of a document block."""
    PARAGRAPH = "PARAGRAPH"
    LIST_ITEM = "LIST_ITEM"
    HEADING_1 = "HEADING_1"
    HEADING_2 = "HEADING_2"
    OTHER = "OTHER"


class ListStyle(str, Enum):
    """Marker style of a list item."""
    BULLET = "BULLET"
    ORDERED = "ORDERED"
    UNKNOWN = "UNKNOWN"


@dataclass
class Block:
    """One structural element of a document."""

    role: BlockRole
    """Paragraph, list item, heading or unsupported element"""

    text: Optional[str] = None
    """Raw text; None when the source could not extract it"""

    list_style: ListStyle = ListStyle.UNKNOWN
    """Marker style, meaningful for list items only"""

    def read_text(self) -> str:
        """Return the raw text or raise ParseError if it could not be extracted."""
        if self.text is None:
            raise ParseError(f"Unreadable {self.role.value} block")
        return self.text


@dataclass
class Document:
    id: str
    name: str
    blocks: List[Block] = field(default_factory=list)


class IDocumentSource(ABC):
    """Abstract interface for document sources."""

    @abstractmethod
    def open(self, document_id: str) -> Document:
        """
        Open a document by id.

        Raises:
            DocumentNotFoundError: if the document is missing or forbidden
        """
        pass


class InMemoryDocumentSource(IDocumentSource):
    """Document source over documents registered in memory."""

    def __init__(self, documents: Optional[Dict[str, Document]] = None):
        self.documents: Dict[str, Document] = dict(documents or {})

    def add(self, document: Document) -> None:
        self.documents[document.id] = document

    def open(self, document_id: str) -> Document:
        document = self.documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document
