"""
Configuration for the nightly review.

load_config() is the only place that reads process state. Everything else
receives a ReviewConfig explicitly, and the get_* factories turn it into
concrete collaborators.
"""

import os
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from ..util.logging import logger

# Version string
VERSION = "0.3.0"

DOCUMENT_SOURCES = ("markdown", "google_docs", "memory")
HASH_STORES = ("sqlite", "memory")
VECTOR_PROVIDERS = ("sqlite", "memory", "faiss", "pinecone")
EMBED_PROVIDERS = ("hash", "sentence_transformers", "openai")
COMPLETION_PROVIDERS = ("mock", "ollama", "openai")


class OpenAISettings(BaseModel):
    api_key: Optional[str] = None
    model: str = "gpt-3.5-turbo"
    embedding_model: str = "text-embedding-3-small"


class PineconeSettings(BaseModel):
    api_key: Optional[str] = None
    index_host: Optional[str] = None

    @field_validator('index_host')
    @classmethod
    def strip_scheme(cls, v):
        if v is None:
            return v
        v = v.strip()
        for scheme in ("https://", "http://"):
            if v.lower().startswith(scheme):
                v = v[len(scheme):]
        return v.rstrip("/") or None


class SlackSettings(BaseModel):
    bot_token: Optional[str] = None
    webhook_url: Optional[str] = None
    channel_id: Optional[str] = None


class EmailSettings(BaseModel):
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    sender: Optional[str] = None
    recipients: List[str] = Field(default_factory=list)


class GoogleDocsSettings(BaseModel):
    access_token: Optional[str] = None
    credentials_file: Optional[str] = None


class ReviewConfig(BaseModel):
    """Complete configuration for one nightly review run."""

    debug: bool = False
    doc_ids: List[str] = Field(default_factory=list)

    document_source: str = "markdown"
    docs_dir: str = "./docs"
    hash_store: str = "sqlite"
    db_path: str = "./data/nightly_review.db"
    vector_provider: str = "sqlite"
    embed_provider: str = "hash"
    embed_dim: int = 384
    embed_model_name: str = "all-MiniLM-L6-v2"
    embed_max_tokens: int = 8192
    completion_provider: str = "mock"
    ollama_model: str = "llama3"

    similarity_threshold: float = 0.98
    rag_top_k: int = 5
    rag_min_score: float = 0.7
    http_timeout_sec: float = 30.0

    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    pinecone: PineconeSettings = Field(default_factory=PineconeSettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    google_docs: GoogleDocsSettings = Field(default_factory=GoogleDocsSettings)
    # Problems found while reading the environment, reported by validate_config
    env_issues: List[str] = Field(default_factory=list)

    @field_validator('doc_ids')
    @classmethod
    def drop_blank_ids(cls, v):
        return [doc_id.strip() for doc_id in v if doc_id and doc_id.strip()]

    @field_validator('document_source', 'hash_store', 'vector_provider', 'embed_provider', 'completion_provider')
    @classmethod
    def lower_provider_names(cls, v):
        return v.strip().lower()


def _split_csv(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def _flag(env: Mapping[str, str], name: str, default: str) -> bool:
    return env.get(name, default).lower() == "true"


def _number(env: Mapping[str, str], name: str, default, cast: Callable, issues: List[str]):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        issues.append(f"Invalid {name}: {raw!r}, using {default}")
        logger.warning(f"Invalid {name} value {raw!r}, using default {default}")
        return default


def load_config(env: Optional[Mapping[str, str]] = None) -> ReviewConfig:
    """
    Build a ReviewConfig from environment variables.

    Args:
        env: Mapping to read instead of os.environ (used by tests)

    Returns:
        Validated ReviewConfig
    """
    env = os.environ if env is None else env
    issues: List[str] = []

    values: Dict[str, object] = {
        "debug": _flag(env, "DEBUG", "false"),
        "doc_ids": _split_csv(env.get("DOC_IDS")),
        "document_source": env.get("DOCUMENT_SOURCE", "markdown"),
        "docs_dir": env.get("DOCS_DIR", "./docs"),
        "hash_store": env.get("HASH_STORE", "sqlite"),
        "db_path": env.get("DB_PATH", "./data/nightly_review.db"),
        "vector_provider": env.get("VECTOR_PROVIDER", "sqlite"),
        "embed_provider": env.get("EMBED_PROVIDER", "hash"),
        "embed_dim": _number(env, "EMBED_DIM", 384, int, issues),
        "embed_model_name": env.get("EMBED_MODEL_NAME", "all-MiniLM-L6-v2"),
        "embed_max_tokens": _number(env, "EMBED_MAX_TOKENS", 8192, int, issues),
        "completion_provider": env.get("COMPLETION_PROVIDER", "mock"),
        "ollama_model": env.get("OLLAMA_MODEL", "llama3"),
        "similarity_threshold": _number(env, "SIMILARITY_THRESHOLD", 0.98, float, issues),
        "rag_top_k": _number(env, "RAG_TOP_K", 5, int, issues),
        "rag_min_score": _number(env, "RAG_MIN_SCORE", 0.7, float, issues),
        "http_timeout_sec": _number(env, "HTTP_TIMEOUT_SEC", 30, float, issues),
        "openai": OpenAISettings(
            api_key=env.get("OPENAI_API_KEY") or None,
            model=env.get("OPENAI_MODEL") or "gpt-3.5-turbo",
            embedding_model=env.get("OPENAI_EMBEDDING_MODEL") or "text-embedding-3-small",
        ),
        "pinecone": PineconeSettings(
            api_key=env.get("PINECONE_API_KEY") or None,
            index_host=env.get("PINECONE_INDEX_HOST") or None,
        ),
        "slack": SlackSettings(
            bot_token=env.get("SLACK_BOT_TOKEN") or None,
            webhook_url=env.get("SLACK_WEBHOOK_URL") or None,
            channel_id=env.get("SLACK_CHANNEL_ID") or None,
        ),
        "email": EmailSettings(
            smtp_host=env.get("SMTP_HOST") or None,
            smtp_port=_number(env, "SMTP_PORT", 587, int, issues),
            username=env.get("SMTP_USERNAME") or None,
            password=env.get("SMTP_PASSWORD") or None,
            use_tls=_flag(env, "SMTP_USE_TLS", "true"),
            sender=env.get("EMAIL_FROM") or None,
            recipients=_split_csv(env.get("EMAIL_TO")),
        ),
        "google_docs": GoogleDocsSettings(
            access_token=env.get("GOOGLE_ACCESS_TOKEN") or None,
            credentials_file=env.get("GOOGLE_CREDENTIALS_FILE") or None,
        ),
        "env_issues": issues,
    }
    return ReviewConfig(**values)


def validate_config(config: ReviewConfig) -> List[str]:
    """Validate configuration and return any issues."""
    issues = list(config.env_issues)

    if not config.doc_ids:
        issues.append("DOC_IDS is empty; no documents will be summarized")

    if config.document_source not in DOCUMENT_SOURCES:
        issues.append(f"Invalid DOCUMENT_SOURCE: {config.document_source}")
    if config.hash_store not in HASH_STORES:
        issues.append(f"Invalid HASH_STORE: {config.hash_store}")
    if config.vector_provider not in VECTOR_PROVIDERS:
        issues.append(f"Invalid VECTOR_PROVIDER: {config.vector_provider}")
    if config.embed_provider not in EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {config.embed_provider}")
    if config.completion_provider not in COMPLETION_PROVIDERS:
        issues.append(f"Invalid COMPLETION_PROVIDER: {config.completion_provider}")

    uses_openai = config.embed_provider == "openai" or config.completion_provider == "openai"
    if uses_openai and not config.openai.api_key:
        issues.append("OPENAI_API_KEY is required for the openai providers")
    if config.vector_provider == "pinecone" and not (config.pinecone.api_key and config.pinecone.index_host):
        issues.append("PINECONE_API_KEY and PINECONE_INDEX_HOST are required for VECTOR_PROVIDER=pinecone")
    google = config.google_docs
    if config.document_source == "google_docs" and not (google.access_token or google.credentials_file):
        issues.append("GOOGLE_ACCESS_TOKEN or GOOGLE_CREDENTIALS_FILE is required for DOCUMENT_SOURCE=google_docs")

    if not 0.0 < config.similarity_threshold <= 1.0:
        issues.append("SIMILARITY_THRESHOLD must be in (0, 1]")
    if not -1.0 <= config.rag_min_score <= 1.0:
        issues.append("RAG_MIN_SCORE must be in [-1, 1]")
    if config.rag_top_k < 1:
        issues.append("RAG_TOP_K must be >= 1")
    if config.embed_max_tokens < 1:
        issues.append("EMBED_MAX_TOKENS must be >= 1")

    return issues


def ensure_db_directory(config: ReviewConfig):
    """Ensure the database directory exists."""
    Path(config.db_path).parent.mkdir(parents=True, exist_ok=True)


def _unknown(kind: str, name: str, fallback: str):
    logger.warning(f"Unknown {kind} '{name}', falling back to '{fallback}'")


def get_hash_store(config: ReviewConfig):
    """Get the configured prior-state store."""
    if config.hash_store == "sqlite":
        from .hash_store import SqliteHashStore
        ensure_db_directory(config)
        return SqliteHashStore(config.db_path)

    if config.hash_store != "memory":
        _unknown("HASH_STORE", config.hash_store, "memory")
    from .hash_store import InMemoryHashStore
    return InMemoryHashStore()


def get_vector_index(config: ReviewConfig):
    """Get the configured vector index implementation."""
    if config.vector_provider == "sqlite":
        from ..vector.sqlite_store import SqliteVectorIndex
        ensure_db_directory(config)
        return SqliteVectorIndex(config.db_path)
    if config.vector_provider == "faiss":
        from ..vector.faiss_store import FaissVectorIndex
        ensure_db_directory(config)
        return FaissVectorIndex(dimension=config.embed_dim, db_path=config.db_path)
    if config.vector_provider == "pinecone":
        from ..vector.pinecone_store import PineconeVectorIndex
        return PineconeVectorIndex(config.pinecone, timeout=config.http_timeout_sec)

    if config.vector_provider != "memory":
        _unknown("VECTOR_PROVIDER", config.vector_provider, "memory")
    from ..vector.index import SimpleInMemoryVectorIndex
    return SimpleInMemoryVectorIndex()


def get_embedding_provider(config: ReviewConfig):
    """Get the configured embedding provider implementation."""
    if config.embed_provider == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(config.embed_model_name, max_tokens=config.embed_max_tokens)
    if config.embed_provider == "openai":
        from ..llm.openai_client import OpenAIEmbeddingProvider
        return OpenAIEmbeddingProvider(config.openai, max_tokens=config.embed_max_tokens,
                                       timeout=config.http_timeout_sec)

    if config.embed_provider != "hash":
        _unknown("EMBED_PROVIDER", config.embed_provider, "hash")
    from ..vector.embeddings import DeterministicHashEmbedding
    return DeterministicHashEmbedding(dimension=config.embed_dim, max_tokens=config.embed_max_tokens)


def get_completion_provider(config: ReviewConfig):
    """Get the configured completion provider implementation."""
    if config.completion_provider == "ollama":
        from ..llm.ollama_client import OllamaCompletionProvider
        return OllamaCompletionProvider(config.ollama_model)
    if config.completion_provider == "openai":
        from ..llm.openai_client import OpenAICompletionProvider
        return OpenAICompletionProvider(config.openai, timeout=config.http_timeout_sec)

    if config.completion_provider != "mock":
        _unknown("COMPLETION_PROVIDER", config.completion_provider, "mock")
    from ..llm.completion import MockCompletionProvider
    return MockCompletionProvider()


def get_document_source(config: ReviewConfig):
    """Get the configured document source."""
    if config.document_source == "google_docs":
        from ..documents.google_docs import GoogleDocsDocumentSource
        return GoogleDocsDocumentSource(config.google_docs)
    if config.document_source == "memory":
        from ..documents.source import InMemoryDocumentSource
        return InMemoryDocumentSource()

    if config.document_source != "markdown":
        _unknown("DOCUMENT_SOURCE", config.document_source, "markdown")
    from ..documents.markdown_source import MarkdownDocumentSource
    return MarkdownDocumentSource(config.docs_dir)
