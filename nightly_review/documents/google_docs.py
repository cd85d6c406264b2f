"""
Google Docs adapter.
Fetches documents.get and maps the structural elements to blocks.
"""

from typing import Any, Dict, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .source import Block, BlockRole, Document, IDocumentSource, ListStyle
from ..core.config import GoogleDocsSettings
from ..core.errors import ConfigError, DocumentNotFoundError, ParseError
from ..util.http import dig
from ..util.logging import logger

SCOPES = ["https://www.googleapis.com/auth/documents.readonly"]

HEADING_STYLES = {
    "HEADING_1": BlockRole.HEADING_1,
    "HEADING_2": BlockRole.HEADING_2,
}

ORDERED_GLYPH_TYPES = {"DECIMAL", "ZERO_DECIMAL", "UPPER_ALPHA", "ALPHA", "UPPER_ROMAN", "ROMAN"}


def _list_style(lists: Dict[str, Any], bullet: Dict[str, Any]) -> ListStyle:
    """Resolve a paragraph's bullet to a list style via the document's list properties."""
    nesting = bullet.get("nestingLevel", 0)
    levels = dig(lists, bullet.get("listId"), "listProperties", "nestingLevels")
    if not isinstance(levels, list) or nesting >= len(levels):
        return ListStyle.UNKNOWN

    level = levels[nesting] or {}
    if level.get("glyphType") in ORDERED_GLYPH_TYPES:
        return ListStyle.ORDERED
    if level.get("glyphSymbol"):
        return ListStyle.BULLET
    return ListStyle.UNKNOWN


def _paragraph_text(paragraph: Dict[str, Any]) -> Optional[str]:
    """Concatenate text runs; None when the element list is malformed."""
    elements = paragraph.get("elements")
    if not isinstance(elements, list):
        return None

    parts = []
    for element in elements:
        if not isinstance(element, dict):
            return None
        content = dig(element, "textRun", "content")
        if isinstance(content, str):
            parts.append(content)
    return "".join(parts)


def blocks_from_google_doc(payload: Dict[str, Any]) -> List[Block]:
    """Map a documents.get response body to blocks."""
    content = dig(payload, "body", "content")
    if not isinstance(content, list):
        raise ParseError("Google Docs response has no body.content")

    lists = payload.get("lists") or {}
    blocks: List[Block] = []

    for element in content:
        paragraph = element.get("paragraph") if isinstance(element, dict) else None
        if paragraph is None:
            # Tables, section breaks and tables of contents
            blocks.append(Block(BlockRole.OTHER))
            continue

        text = _paragraph_text(paragraph)
        named_style = dig(paragraph, "paragraphStyle", "namedStyleType")
        bullet = paragraph.get("bullet")

        if named_style in HEADING_STYLES:
            blocks.append(Block(HEADING_STYLES[named_style], text))
        elif isinstance(bullet, dict):
            blocks.append(Block(BlockRole.LIST_ITEM, text, _list_style(lists, bullet)))
        else:
            blocks.append(Block(BlockRole.PARAGRAPH, text))

    return blocks


class GoogleDocsDocumentSource(IDocumentSource):
    """Opens Google Docs by id, with an OAuth access token or a service account file."""

    def __init__(self, settings: GoogleDocsSettings):
        self.settings = settings
        self._service = None

    def _credentials(self):
        if self.settings.credentials_file:
            return service_account.Credentials.from_service_account_file(
                self.settings.credentials_file, scopes=SCOPES
            )
        if self.settings.access_token:
            return Credentials(token=self.settings.access_token)
        return None

    @property
    def service(self):
        if self._service is None:
            credentials = self._credentials()
            if credentials is None:
                raise ConfigError("GOOGLE_ACCESS_TOKEN or GOOGLE_CREDENTIALS_FILE is missing")
            self._service = build("docs", "v1", credentials=credentials, cache_discovery=False)
        return self._service

    def open(self, document_id: str) -> Document:
        try:
            data = self.service.documents().get(documentId=document_id).execute()
        except ConfigError as e:
            logger.log_provider_call("google_docs", "open", "failed", {"error": str(e)})
            raise DocumentNotFoundError(document_id, str(e)) from e
        except HttpError as e:
            status = e.resp.status
            reason = {403: "forbidden", 404: "not found"}.get(status, f"HTTP {status}")
            logger.log_provider_call("google_docs", "open", "failed", {"document_id": document_id,
                                                                       "code": status})
            raise DocumentNotFoundError(document_id, reason) from e
        except (GoogleAuthError, OSError, ValueError) as e:
            logger.log_provider_call("google_docs", "open", "failed", {"document_id": document_id,
                                                                       "error": str(e)})
            raise DocumentNotFoundError(document_id, str(e)) from e

        try:
            blocks = blocks_from_google_doc(data)
        except ParseError as e:
            raise DocumentNotFoundError(document_id, str(e)) from e

        logger.log_provider_call("google_docs", "open", "success", {"document_id": document_id,
                                                                    "blocks": len(blocks)})
        return Document(id=document_id, name=data.get("title") or document_id, blocks=blocks)
