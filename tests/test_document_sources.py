"""
Document source tests: Markdown files, Google Docs payload mapping, in-memory.
"""

import pytest
from googleapiclient.errors import HttpError
from unittest.mock import MagicMock, patch

from nightly_review.core.chunker import extract_chunks
from nightly_review.core.config import GoogleDocsSettings
from nightly_review.core.errors import DocumentNotFoundError
from nightly_review.documents.google_docs import GoogleDocsDocumentSource, blocks_from_google_doc
from nightly_review.documents.markdown_source import MarkdownDocumentSource, parse_markdown
from nightly_review.documents.source import Block, BlockRole, Document, InMemoryDocumentSource, ListStyle


SAMPLE_MARKDOWN = """\
Intro text before any heading.

# May 7, 2025
## Offline Venture Studio
Email about a potential
advisory role.

- follow up with Logan
* check comp

1. draft PRD
2. review ICP

---
![diagram](diagram.png)

### Deep heading
# May 19, 2025
Started work on PRD.
"""


class TestMarkdown:
    def test_parse_roles(self):
        blocks = parse_markdown(SAMPLE_MARKDOWN)
        roles = [block.role for block in blocks]

        assert roles == [
            BlockRole.PARAGRAPH,
            BlockRole.HEADING_1,
            BlockRole.HEADING_2,
            BlockRole.PARAGRAPH,
            BlockRole.LIST_ITEM,
            BlockRole.LIST_ITEM,
            BlockRole.LIST_ITEM,
            BlockRole.LIST_ITEM,
            BlockRole.OTHER,
            BlockRole.OTHER,
            BlockRole.PARAGRAPH,
            BlockRole.HEADING_1,
            BlockRole.PARAGRAPH,
        ]
        assert blocks[3].text == "Email about a potential advisory role."
        assert blocks[4].list_style == ListStyle.BULLET
        assert blocks[6].list_style == ListStyle.ORDERED
        assert blocks[10].text == "Deep heading"

    def test_heading_keeps_trailing_hash_in_text(self):
        blocks = parse_markdown("# Notes on C#\n# Closed ##")
        assert [block.text for block in blocks] == ["Notes on C#", "Closed"]

    def test_chunks_from_markdown(self):
        chunks = extract_chunks(parse_markdown(SAMPLE_MARKDOWN))

        assert [chunk.title for chunk in chunks] == ["May 7, 2025", "May 19, 2025"]
        assert chunks[0].content == (
            "## Offline Venture Studio\n"
            "Email about a potential advisory role.\n"
            "* follow up with Logan\n"
            "* check comp\n"
            "1. draft PRD\n"
            "2. review ICP\n"
            "Deep heading"
        )
        assert chunks[1].content == "Started work on PRD."

    def test_open_reads_file(self, tmp_path):
        (tmp_path / "weekly.md").write_text("# A\ntext\n", encoding="utf-8")
        document = MarkdownDocumentSource(str(tmp_path)).open("weekly")

        assert document.id == "weekly"
        assert document.name == "weekly"
        assert [block.role for block in document.blocks] == [BlockRole.HEADING_1, BlockRole.PARAGRAPH]

    def test_missing_file_raises_not_found(self, tmp_path):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            MarkdownDocumentSource(str(tmp_path)).open("missing")
        assert exc_info.value.document_id == "missing"

    @pytest.mark.parametrize("document_id", ["../secret", "a/b", ""])
    def test_path_like_ids_are_rejected(self, tmp_path, document_id):
        with pytest.raises(DocumentNotFoundError):
            MarkdownDocumentSource(str(tmp_path)).open(document_id)


def google_payload():
    return {
        "title": "Weekly Notes",
        "lists": {
            "kix.bullets": {"listProperties": {"nestingLevels": [{"glyphSymbol": "●"}]}},
            "kix.numbers": {"listProperties": {"nestingLevels": [{"glyphType": "DECIMAL"}]}},
        },
        "body": {"content": [
            {"sectionBreak": {}},
            {"paragraph": {"paragraphStyle": {"namedStyleType": "HEADING_1"},
                           "elements": [{"textRun": {"content": "Status\n"}}]}},
            {"paragraph": {"paragraphStyle": {"namedStyleType": "HEADING_2"},
                           "elements": [{"textRun": {"content": "Hiring\n"}}]}},
            {"paragraph": {"paragraphStyle": {"namedStyleType": "NORMAL_TEXT"},
                           "elements": [{"textRun": {"content": "Closed two "}},
                                        {"textRun": {"content": "roles.\n"}}]}},
            {"paragraph": {"paragraphStyle": {"namedStyleType": "NORMAL_TEXT"},
                           "bullet": {"listId": "kix.bullets"},
                           "elements": [{"textRun": {"content": "Send offer\n"}}]}},
            {"paragraph": {"paragraphStyle": {"namedStyleType": "NORMAL_TEXT"},
                           "bullet": {"listId": "kix.numbers"},
                           "elements": [{"textRun": {"content": "Step one\n"}}]}},
            {"paragraph": {"paragraphStyle": {"namedStyleType": "NORMAL_TEXT"},
                           "bullet": {"listId": "kix.unknown"},
                           "elements": [{"textRun": {"content": "Loose item\n"}}]}},
            {"table": {}},
            {"paragraph": {"paragraphStyle": {"namedStyleType": "NORMAL_TEXT"}, "elements": "broken"}},
        ]},
    }


class TestGoogleDocs:
    def test_blocks_from_payload(self):
        blocks = blocks_from_google_doc(google_payload())

        assert [block.role for block in blocks] == [
            BlockRole.OTHER,
            BlockRole.HEADING_1,
            BlockRole.HEADING_2,
            BlockRole.PARAGRAPH,
            BlockRole.LIST_ITEM,
            BlockRole.LIST_ITEM,
            BlockRole.LIST_ITEM,
            BlockRole.OTHER,
            BlockRole.PARAGRAPH,
        ]
        assert blocks[3].text == "Closed two roles.\n"
        assert [blocks[i].list_style for i in (4, 5, 6)] == [ListStyle.BULLET, ListStyle.ORDERED, ListStyle.UNKNOWN]
        assert blocks[8].text is None

    def test_chunks_from_payload(self):
        chunks = extract_chunks(blocks_from_google_doc(google_payload()))
        assert len(chunks) == 1
        assert chunks[0].title == "Status"
        assert chunks[0].content == "## Hiring\nClosed two roles.\n* Send offer\n1. Step one\n- Loose item"

    def test_open_success(self):
        source = GoogleDocsDocumentSource(GoogleDocsSettings(access_token="ya29.token"))
        with patch("nightly_review.documents.google_docs.build") as mock_build:
            documents = mock_build.return_value.documents.return_value
            documents.get.return_value.execute.return_value = google_payload()
            document = source.open("doc-123")

        assert document.name == "Weekly Notes"
        assert len(document.blocks) == 9
        documents.get.assert_called_once_with(documentId="doc-123")
        args, kwargs = mock_build.call_args
        assert args == ("docs", "v1")
        assert kwargs["credentials"].token == "ya29.token"

    @pytest.mark.parametrize("status,reason", [(403, "forbidden"), (404, "not found"), (500, "HTTP 500")])
    def test_open_failure_statuses(self, status, reason):
        source = GoogleDocsDocumentSource(GoogleDocsSettings(access_token="ya29.token"))
        error = HttpError(MagicMock(status=status, reason="error"), b"")
        with patch("nightly_review.documents.google_docs.build") as mock_build:
            mock_build.return_value.documents.return_value.get.return_value.execute.side_effect = error
            with pytest.raises(DocumentNotFoundError) as exc_info:
                source.open("doc-123")

        assert exc_info.value.reason == reason

    def test_missing_credentials_raise_not_found(self):
        with patch("nightly_review.documents.google_docs.build") as mock_build:
            with pytest.raises(DocumentNotFoundError):
                GoogleDocsDocumentSource(GoogleDocsSettings()).open("doc-123")
            mock_build.assert_not_called()

    def test_missing_service_account_file_raises_not_found(self, tmp_path):
        settings = GoogleDocsSettings(credentials_file=str(tmp_path / "missing.json"))
        with pytest.raises(DocumentNotFoundError):
            GoogleDocsDocumentSource(settings).open("doc-123")


def test_in_memory_source():
    source = InMemoryDocumentSource()
    source.add(Document(id="d1", name="Doc", blocks=[Block(BlockRole.HEADING_1, "A")]))

    assert source.open("d1").name == "Doc"
    with pytest.raises(DocumentNotFoundError):
        source.open("d2")
