"""
Delta summarizer: summarize only the chunks of a document that changed in meaning.

Per chunk the decision is staged. An identical content hash skips the chunk.
A changed hash is confirmed against the prior embedding (fetched by the prior
hash) before summarizing, and a chunk with no history is always summarized.
The current hashes of every chunk seen are persisted at the end of the pass.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from .chunker import extract_chunks
from .config import (ReviewConfig, get_completion_provider, get_document_source,
                     get_embedding_provider, get_hash_store, get_vector_index)
from .errors import NightlyReviewError
from .hash_store import IHashStore
from .hashing import hash_content
from .prompts import SUMMARY_SYSTEM_MESSAGE, build_summarization_prompt
from .response_parser import parse_ai_response
from .schema import Chunk, ChunkChangeRecord, ChunkState, DocumentReport, SummaryResult
from ..documents.source import IDocumentSource
from ..llm.completion import ICompletionProvider
from ..util.logging import logger
from ..vector.diff import are_meaningfully_different
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorIndex
from ..vector.types import VectorRecord

AI_ERROR_SUMMARY = "Error: Failed to get summary from AI."
AI_ERROR_ACTIONS = "No action items (AI error)."
UNKNOWN_TITLE = "Unknown Title"


class DeltaSummarizer:
    """Change detection and summarization for one document at a time."""

    def __init__(self, config: ReviewConfig, document_source: IDocumentSource, hash_store: IHashStore,
                 vector_index: IVectorIndex, embedding_provider: IEmbeddingProvider,
                 completion_provider: ICompletionProvider):
        self.config = config
        self.document_source = document_source
        self.hash_store = hash_store
        self.vector_index = vector_index
        self.embedding_provider = embedding_provider
        self.completion_provider = completion_provider

    @classmethod
    def from_config(cls, config: ReviewConfig) -> "DeltaSummarizer":
        """Wire every collaborator from configuration."""
        return cls(
            config,
            document_source=get_document_source(config),
            hash_store=get_hash_store(config),
            vector_index=get_vector_index(config),
            embedding_provider=get_embedding_provider(config),
            completion_provider=get_completion_provider(config),
        )

    def summarize_document(self, document_id: str) -> List[SummaryResult]:
        """Summarize the meaningfully changed chunks of a document."""
        return self.process_document(document_id).results

    def process_document(self, document_id: str) -> DocumentReport:
        """
        Run one change-detection pass over a document.

        A document that cannot be opened yields an empty, unopened report and
        leaves persisted state untouched.

        Returns:
            DocumentReport with one result per summarized chunk and one
            record per chunk seen
        """
        report = DocumentReport(document_id=document_id)

        try:
            document = self.document_source.open(document_id)
        except NightlyReviewError as e:
            logger.log_operation("document.open", "failed", {"document_id": document_id, "error": str(e)})
            report.opened = False
            return report

        chunks = extract_chunks(document.blocks, document.name)
        prior_hashes = self.hash_store.load_hashes(document_id)
        logger.log_operation("document.process", "started", {
            "document_id": document_id,
            "chunks": len(chunks),
            "prior_hashes": len(prior_hashes)
        })

        current_hashes: Dict[str, str] = {}
        for chunk in chunks:
            record = ChunkChangeRecord(
                title=chunk.title,
                current_hash=hash_content(chunk.content),
                prior_hash=prior_hashes.get(chunk.title),
            )
            current_hashes[chunk.title] = record.current_hash
            report.records.append(record)

            result = self._process_chunk(document_id, chunk, record)
            if result is not None:
                report.results.append(result)

        self.hash_store.save_hashes(document_id, current_hashes)

        logger.log_operation("document.process", "success", {
            "document_id": document_id,
            "summarized": len(report.results),
            "unchanged": report.count(ChunkState.UNCHANGED),
            "filtered": report.count(ChunkState.FILTERED),
            "embedding_failed": report.count(ChunkState.EMBEDDING_FAILED)
        })
        return report

    def _process_chunk(self, document_id: str, chunk: Chunk, record: ChunkChangeRecord) -> Optional[SummaryResult]:
        if record.prior_hash is not None and record.prior_hash == record.current_hash:
            record.state = ChunkState.UNCHANGED
            logger.log_chunk_decision(document_id, chunk.title, record.state.value)
            return None

        if record.prior_hash is not None:
            record.state = ChunkState.HASH_CHANGED
            record.current_embedding = self.embedding_provider.embed_text(chunk.content)
            if record.current_embedding is None:
                # Hash is still persisted so the next run compares against this content
                record.state = ChunkState.EMBEDDING_FAILED
                logger.log_chunk_decision(document_id, chunk.title, record.state.value,
                                          {"reason": "embedding failed"})
                return None

            prior_embedding = self._fetch(document_id, record.prior_hash)
            if prior_embedding is not None and not are_meaningfully_different(
                    record.current_embedding, prior_embedding, self.config.similarity_threshold):
                # Old vector stays as the baseline for the next comparison
                record.state = ChunkState.FILTERED
                logger.log_chunk_decision(document_id, chunk.title, record.state.value,
                                          {"prior_hash": record.prior_hash})
                return None

            self._upsert(document_id, chunk, record)
        else:
            record.state = ChunkState.NEW
            record.current_embedding = self.embedding_provider.embed_text(chunk.content)
            if record.current_embedding is not None:
                self._upsert(document_id, chunk, record)
            else:
                logger.log_chunk_decision(document_id, chunk.title, record.state.value,
                                          {"reason": "embedding failed, summarizing without context"})

        result = self._summarize(document_id, chunk, record.current_embedding)
        record.state = ChunkState.SUMMARIZED
        logger.log_chunk_decision(document_id, chunk.title, record.state.value,
                                  {"current_hash": record.current_hash})
        return result

    def _summarize(self, document_id: str, chunk: Chunk, embedding: Optional[List[float]]) -> SummaryResult:
        context = self._rag_context(document_id, embedding) if embedding is not None else ""
        prompt = build_summarization_prompt(chunk.content, context)

        try:
            response = self.completion_provider.complete(prompt, system_message=SUMMARY_SYSTEM_MESSAGE)
        except Exception as e:
            logger.log_provider_call("completion", "complete", "failed", {"title": chunk.title, "error": str(e)})
            response = None

        if not isinstance(response, str) or not response.strip():
            logger.warning(f"No usable completion for chunk '{chunk.title}' in {document_id}")
            return SummaryResult(title=chunk.title, summary=AI_ERROR_SUMMARY, actions=AI_ERROR_ACTIONS)

        parsed = parse_ai_response(response)
        return SummaryResult(title=chunk.title, summary=parsed["summary"], actions=parsed["actions"])

    def _rag_context(self, document_id: str, embedding: List[float]) -> str:
        """Titles of related chunks in the document namespace, as '(title)' lines."""
        try:
            matches = self.vector_index.query(document_id, embedding, top_k=self.config.rag_top_k,
                                              min_score=self.config.rag_min_score)
        except Exception as e:
            logger.log_vector_operation("query", document_id, {"error": str(e)}, status="failed")
            return ""

        titles = [f"({match.metadata.get('title') or UNKNOWN_TITLE})" for match in matches
                  if match.score > self.config.rag_min_score]
        return " \n ".join(titles)

    def _fetch(self, document_id: str, record_id: str) -> Optional[List[float]]:
        try:
            return self.vector_index.fetch(document_id, record_id)
        except Exception as e:
            logger.log_vector_operation("fetch", record_id, {"namespace": document_id, "error": str(e)},
                                        status="failed")
            return None

    def _upsert(self, document_id: str, chunk: Chunk, record: ChunkChangeRecord) -> bool:
        vector_record = VectorRecord(
            id=record.current_hash,
            vector=record.current_embedding,
            metadata={
                "title": chunk.title,
                "hash": record.current_hash,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
        try:
            return self.vector_index.upsert(document_id, vector_record)
        except Exception as e:
            logger.log_vector_operation("upsert", record.current_hash, {"namespace": document_id, "error": str(e)},
                                        status="failed")
            return False
