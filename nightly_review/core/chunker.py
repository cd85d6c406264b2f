"""
Chunk extraction: split a heading-structured document into titled chunks.

A chunk runs from one level-1 heading to the next. Level-2 headings become
'## ' subsection markers inside the open chunk, list items get a marker
from their list style, and everything before the first level-1 heading is
dropped.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .errors import ParseError
from .schema import Chunk
from ..documents.source import Block, BlockRole, ListStyle
from ..util.logging import logger

BULLET_MARKER = "* "
UNKNOWN_MARKER = "- "


class _OpenChunk:
    def __init__(self, title: str):
        self.title = title
        self.lines: List[str] = []
        self.ordered_index = 0

    def add(self, line: str):
        self.lines.append(line)

    def list_marker(self, style: ListStyle) -> str:
        if style == ListStyle.ORDERED:
            self.ordered_index += 1
            return f"{self.ordered_index}. "
        self.ordered_index = 0
        return BULLET_MARKER if style == ListStyle.BULLET else UNKNOWN_MARKER

    def end_ordered_run(self):
        self.ordered_index = 0


def _unique_title(title: str, seen: Dict[str, int]) -> str:
    """Suffix repeated headings with ' (2)', ' (3)', ..."""
    count = seen.get(title, 0) + 1
    seen[title] = count
    if count == 1:
        return title

    candidate = f"{title} ({count})"
    while candidate in seen:
        count += 1
        candidate = f"{title} ({count})"
    seen[candidate] = 1
    return candidate


def extract_chunks(blocks: Sequence[Block], document_name: Optional[str] = None) -> List[Chunk]:
    """
    Extract titled chunks from document blocks.

    Args:
        blocks: Blocks in document order
        document_name: Used for log messages only

    Returns:
        Chunks in document order; chunks without content are omitted
    """
    chunks: List[Chunk] = []
    seen_titles: Dict[str, int] = {}
    current: Optional[_OpenChunk] = None

    def flush():
        if current is None:
            return
        if current.lines:
            chunks.append(Chunk(title=current.title, content="\n".join(current.lines)))
        else:
            logger.warning(f"Dropping empty chunk '{current.title}' in {document_name or 'document'}")

    for index, block in enumerate(blocks):
        if block.role == BlockRole.OTHER:
            continue

        try:
            text = block.read_text().strip()
        except ParseError as e:
            logger.warning(f"Skipping unreadable block {index + 1} in {document_name or 'document'}: {e}")
            continue

        if not text:
            continue

        if block.role == BlockRole.HEADING_1:
            flush()
            current = _OpenChunk(_unique_title(text, seen_titles))
            continue

        if current is None:
            logger.debug(f"Skipping {block.role.value} before first heading: {text[:50]}")
            continue

        if block.role == BlockRole.HEADING_2:
            current.end_ordered_run()
            current.add(f"## {text}")
        elif block.role == BlockRole.LIST_ITEM:
            current.add(current.list_marker(block.list_style) + text)
        else:
            current.end_ordered_run()
            current.add(text)

    flush()

    logger.log_operation("chunks.extract", "success", {
        "document": document_name,
        "count": len(chunks),
        "titles": [chunk.title for chunk in chunks]
    }, level=logging.DEBUG)
    return chunks
