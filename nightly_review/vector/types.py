"""
Records stored in and returned by the vector index.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class VectorRecord:
    """Represents a chunk embedding with its metadata."""

    id: str
    """Content hash of the chunk the vector was computed from"""

    vector: Optional[List[float]]
    """The embedding of the chunk content"""

    metadata: Dict[str, object] = field(default_factory=dict)
    """title, hash and timestamp of the chunk at upsert time"""


@dataclass
class QueryResult:
    """Represents a search result from the vector index."""

    id: str
    """Identifier for the matching record"""

    score: float
    """Cosine similarity of the match"""

    metadata: Dict[str, object] = field(default_factory=dict)
    """Metadata associated with the matched record"""
