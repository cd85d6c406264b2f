"""
Data records shared by the change-detection pipeline and its collaborators.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class ChunkState(str, Enum):
    """Outcome of change detection for one chunk in one run."""
    UNCHANGED = "UNCHANGED"
    NEW = "NEW"
    HASH_CHANGED = "HASH_CHANGED"
    FILTERED = "FILTERED"
    EMBEDDING_FAILED = "EMBEDDING_FAILED"
    SUMMARIZED = "SUMMARIZED"


@dataclass
class Chunk:
    title: str
    content: str


@dataclass
class ChunkChangeRecord:
    """Transient per-chunk bookkeeping; only current_hash outlives the run."""
    title: str
    current_hash: str
    prior_hash: Optional[str] = None
    current_embedding: Optional[List[float]] = None
    state: ChunkState = ChunkState.NEW


@dataclass
class PersistedHashEntry:
    document_id: str
    chunk_title: str
    content_hash: str
    timestamp: datetime


@dataclass
class SummaryResult:
    title: str
    summary: str
    actions: str


@dataclass
class DocumentReport:
    """Everything one document pass produced, for logging and the runner."""
    document_id: str
    opened: bool = True
    results: List[SummaryResult] = field(default_factory=list)
    records: List[ChunkChangeRecord] = field(default_factory=list)

    def count(self, state: ChunkState) -> int:
        return sum(1 for record in self.records if record.state == state)


@dataclass
class ChatMessage:
    channel: str
    user: Optional[str]
    text: str
    ts: str


@dataclass
class ChatDigest:
    summary: str
    actions: str = ""
