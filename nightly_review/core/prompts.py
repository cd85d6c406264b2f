"""
Prompt templates for document and chat summarization.
"""

from typing import Optional

SUMMARY_SYSTEM_MESSAGE = "You are an assistant summarizing document sections."

SUMMARIZATION_TEMPLATE = """\
1. Review the "New Content" and the "Relevant Context" below, which may include historical summaries or prior discussions from the vector index.
2. Identify and explicitly connect ongoing threads, unresolved issues, or recurring themes. If any previous action items are now resolved or still pending, mention their status.
3. Prioritize and summarize the most important decisions, blockers, or new directions. Group related updates under themes or projects when possible.
4. When referencing a channel or thread, include the channel name or a citation for traceability.
5. List all current and outstanding action items, marking any carried over from previous context as "Still Pending".

Respond in exactly three labeled sections:

Summary of Changes (with Context and Progress):
- [Concise, prioritized summary connecting new information to historical context, highlighting progress, blockers, and ongoing themes]

Outstanding Action Items:
- [Pending action item 1 (Owner: X, Deadline: Y, Still Pending)]
- [Pending action item 2]
- (Mark as "Still Pending" if carried over from previous summaries)

New Action Items:
- [New action item 1 (Owner: X, Deadline: Y)]
- [New action item 2]
- (Use "No new action items." if none are present)

---
Relevant Context (from the vector index, including prior summaries or discussions):
{context}
---
New Content:
{content}
---"""

CHAT_DIGEST_TEMPLATE = """\
You are a helpful assistant. Here's a dump of all Slack messages across every public channel in the last 24 hours:

---
{messages}
---

Your job:
1. Provide a concise *summary* of the major discussions or events.
2. Extract any *action items* (assignments, follow-ups, decisions) implied by the messages.

Respond in JSON exactly as:
{{
  "summary": "...",
  "actions": "..."
}}"""


def build_summarization_prompt(content: str, context: Optional[str] = None) -> str:
    """Build the document-chunk summarization prompt."""
    return SUMMARIZATION_TEMPLATE.format(context=context or "None provided.", content=content)


def build_chat_digest_prompt(message_dump: str) -> str:
    """Build the chat-activity summarization prompt."""
    return CHAT_DIGEST_TEMPLATE.format(messages=message_dump)
