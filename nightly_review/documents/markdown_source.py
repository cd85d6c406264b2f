"""
Markdown files as a document source.

Each document lives at <root>/<document_id>.md. Only the structure the chunker
cares about is recognized: '# ' and '## ' headings, bullet and ordered list
items, paragraphs separated by blank lines, and rules/images as OTHER blocks.
"""

import re
from pathlib import Path
from typing import List

from .source import Block, BlockRole, Document, IDocumentSource, ListStyle
from ..core.errors import DocumentNotFoundError
from ..util.logging import logger

HEADING_RE = re.compile(r'^(#{1,6})\s+(.*?)(?:\s+#+)?\s*$')
BULLET_RE = re.compile(r'^\s*[-*+]\s+(.*)$')
ORDERED_RE = re.compile(r'^\s*\d+[.)]\s+(.*)$')
RULE_RE = re.compile(r'^\s*([-*_])(\s*\1){2,}\s*$')
IMAGE_RE = re.compile(r'^\s*!\[[^\]]*\]\([^)]*\)\s*$')


def parse_markdown(text: str) -> List[Block]:
    """Split Markdown text into blocks."""
    blocks: List[Block] = []
    paragraph: List[str] = []

    def flush_paragraph():
        if paragraph:
            blocks.append(Block(BlockRole.PARAGRAPH, " ".join(paragraph)))
            paragraph.clear()

    for raw_line in text.splitlines():
        line = raw_line.rstrip()

        if not line.strip():
            flush_paragraph()
            continue

        # Rules are checked before bullets: '---' and '* * *' look like list items
        if RULE_RE.match(line) or IMAGE_RE.match(line):
            flush_paragraph()
            blocks.append(Block(BlockRole.OTHER))
            continue

        heading = HEADING_RE.match(line)
        if heading:
            flush_paragraph()
            level = len(heading.group(1))
            if level == 1:
                blocks.append(Block(BlockRole.HEADING_1, heading.group(2)))
            elif level == 2:
                blocks.append(Block(BlockRole.HEADING_2, heading.group(2)))
            else:
                blocks.append(Block(BlockRole.PARAGRAPH, heading.group(2)))
            continue

        bullet = BULLET_RE.match(line)
        if bullet:
            flush_paragraph()
            blocks.append(Block(BlockRole.LIST_ITEM, bullet.group(1), ListStyle.BULLET))
            continue

        ordered = ORDERED_RE.match(line)
        if ordered:
            flush_paragraph()
            blocks.append(Block(BlockRole.LIST_ITEM, ordered.group(1), ListStyle.ORDERED))
            continue

        paragraph.append(line.strip())

    flush_paragraph()
    return blocks


class MarkdownDocumentSource(IDocumentSource):
    """Reads <root_dir>/<document_id>.md."""

    def __init__(self, root_dir: str):
        self.root_dir = Path(root_dir)

    def _path_for(self, document_id: str) -> Path:
        # Ids are file stems, never paths
        if not document_id or Path(document_id).name != document_id:
            raise DocumentNotFoundError(document_id, "invalid document id")
        return self.root_dir / f"{document_id}.md"

    def open(self, document_id: str) -> Document:
        path = self._path_for(document_id)
        if not path.is_file():
            raise DocumentNotFoundError(document_id, f"{path} does not exist")

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentNotFoundError(document_id, str(e)) from e

        blocks = parse_markdown(text)
        logger.log_provider_call("markdown", "open", "success", {"document_id": document_id,
                                                                 "blocks": len(blocks)})
        return Document(id=document_id, name=path.stem, blocks=blocks)
