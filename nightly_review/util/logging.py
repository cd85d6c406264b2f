"""
Structured logging for the nightly review pipeline.
Wraps the standard library logger with operation-style helpers used by the
summarizer, the stores and the provider adapters.
"""

import logging
import os
from typing import Any, Dict, List

SENSITIVE_FIELDS = ['api_key', 'token', 'password', 'content', 'prompt', 'secret']


class StructuredLogger:
    """Structured logger for pipeline, store and provider operations."""

    def __init__(self, name: str = "nightly_review"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if _debug_from_env() else logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_debug(self, enabled: bool) -> None:
        """Switch between DEBUG and INFO verbosity."""
        self.logger.setLevel(logging.DEBUG if enabled else logging.INFO)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {sanitize_payload(details)}"

        self.logger.log(level, message)

    def log_chunk_decision(self, document_id: str, title: str, state: str, details: Dict[str, Any] = None):
        """Log the change-detection outcome for one chunk."""
        log_details = {"document_id": document_id, "title": title}
        if details:
            log_details.update(details)

        self.log_operation(f"chunk.{state.lower()}", "decided", log_details, level=logging.DEBUG)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector index operation."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        level = logging.DEBUG if status == "success" else logging.WARNING
        self.log_operation(f"vector.{operation}", status, log_details, level=level)

    def log_provider_call(self, provider: str, operation: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a call to an external provider (embedding, completion, document, store)."""
        level = logging.DEBUG if status == "success" else logging.WARNING
        self.log_operation(f"{provider}.{operation}", status, details, level=level)

    def log_delivery(self, channel: str, status: str, details: Dict[str, Any] = None):
        """Log a digest delivery attempt."""
        level = logging.INFO if status == "sent" else logging.WARNING
        self.log_operation(f"delivery.{channel}", status, details, level=level)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def _debug_from_env() -> bool:
    return os.getenv("DEBUG", "false").lower() == "true"


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for logging: redact secret-looking keys, truncate long strings."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, (list, tuple)):
        if len(payload) > 20:
            # Long lists are usually vectors
            return f"[{len(payload)} items]"
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload


# Global logger instance
logger = StructuredLogger()
