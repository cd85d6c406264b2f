"""
Parser for the labelled summary / action-items response format.
"""

import re
from typing import Any, Dict

from ..util.logging import logger

DEFAULT_SUMMARY = "No summary provided."
DEFAULT_ACTIONS = "No action items."

# 'Summary of Changes:' and 'Summary of Changes (with Context and Progress):'
SUMMARY_HEADER_RE = re.compile(r'summary of changes[^:\n]*:', re.IGNORECASE)
# 'Action Items:', 'Outstanding Action Items:', 'New Action Item:'
ACTION_HEADER_RE = re.compile(r'action items?:', re.IGNORECASE)
# A whole line that only says there is nothing to do, e.g. '- No new action items.'
NO_ACTIONS_LINE_RE = re.compile(r'^[-*\u2022\s]*no (?:new |outstanding )?action items?\.?$', re.IGNORECASE)


def parse_ai_response(text: Any) -> Dict[str, str]:
    """
    Split a model response into summary and action sections.

    Lines before any header count as summary. Header lines are dropped, and
    a later header of either kind switches the active section again.

    Returns:
        {"summary": str, "actions": str}; never raises
    """
    if not isinstance(text, str) or not text.strip():
        logger.debug("Empty or non-string response passed to parser")
        return {"summary": DEFAULT_SUMMARY, "actions": DEFAULT_ACTIONS}

    mode = "summary"
    summary_lines = []
    action_lines = []

    for line in text.splitlines():
        stripped = line.strip()

        if ACTION_HEADER_RE.search(stripped):
            mode = "actions"
            continue
        if SUMMARY_HEADER_RE.search(stripped):
            mode = "summary"
            continue

        if not stripped:
            continue
        if mode == "summary":
            summary_lines.append(stripped)
        else:
            action_lines.append(stripped)

    summary = "\n".join(summary_lines).strip() or DEFAULT_SUMMARY
    # Placeholder lines are dropped; real items in the other section survive
    action_lines = [line for line in action_lines if not NO_ACTIONS_LINE_RE.match(line)]
    actions = "\n".join(action_lines).strip() or DEFAULT_ACTIONS

    return {"summary": summary, "actions": actions}
