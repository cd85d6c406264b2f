"""
Slack activity: channel enumeration, 24-hour history fetch and the LLM digest.
"""

import json
import re
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from ..core.config import SlackSettings
from ..core.prompts import build_chat_digest_prompt
from ..core.schema import ChatDigest, ChatMessage
from ..llm.completion import ICompletionProvider
from ..util.logging import logger

HISTORY_WINDOW_SEC = 24 * 3600

NO_ACTIVITY_SUMMARY = "No Slack activity in the past 24 hours."
CHAT_ERROR_SUMMARY = "Error: Failed to summarize Slack activity."

CODE_FENCE_RE = re.compile(r'^```(?:json)?\s*(.*?)\s*```$', re.DOTALL | re.IGNORECASE)


class SlackClient:
    """Reads public channel history through the Slack Web API."""

    def __init__(self, settings: SlackSettings, timeout: float = 30.0, client: Optional[WebClient] = None):
        self.settings = settings
        self.client = client or WebClient(token=settings.bot_token, timeout=int(timeout))

    def list_public_channels(self) -> List[Dict[str, Any]]:
        """
        List public channels the bot can read, joining the ones it is not in.

        Returns:
            Channel objects the bot is a member of after joining
        """
        if not self.settings.bot_token:
            logger.log_provider_call("slack", "conversations.list", "skipped",
                                     {"error": "SLACK_BOT_TOKEN is missing"})
            return []

        channels: List[Dict[str, Any]] = []
        cursor = None
        try:
            while True:
                response = self.client.conversations_list(types="public_channel", limit=1000, cursor=cursor)
                channels.extend(response.get("channels") or [])
                cursor = (response.get("response_metadata") or {}).get("next_cursor")
                if not cursor:
                    break
        except (SlackClientError, OSError) as e:
            logger.log_provider_call("slack", "conversations.list", "failed", {"error": str(e)})
            if not channels:
                return []

        members = []
        for channel in channels:
            if channel.get("is_member") or self._join(channel):
                members.append(channel)

        logger.log_provider_call("slack", "conversations.list", "success", {
            "channels": len(channels),
            "member_of": [channel.get("name") or channel.get("id") for channel in members]
        })
        return members

    def _join(self, channel: Dict[str, Any]) -> bool:
        try:
            self.client.conversations_join(channel=channel.get("id"))
            return True
        except (SlackClientError, OSError) as e:
            logger.log_provider_call("slack", "conversations.join", "failed", {
                "channel": channel.get("name") or channel.get("id"),
                "error": str(e)
            })
            return False

    def fetch_messages_since(self, oldest: Optional[float] = None) -> List[ChatMessage]:
        """
        Fetch messages from every readable public channel.

        Args:
            oldest: Unix timestamp lower bound, defaults to 24 hours ago

        Returns:
            Messages across channels; a failing channel is skipped
        """
        if oldest is None:
            oldest = time.time() - HISTORY_WINDOW_SEC

        messages: List[ChatMessage] = []
        for channel in self.list_public_channels():
            name = channel.get("name") or channel.get("id")
            try:
                response = self.client.conversations_history(channel=channel.get("id"), oldest=str(oldest))
            except (SlackClientError, OSError) as e:
                logger.log_provider_call("slack", "conversations.history", "failed",
                                         {"channel": name, "error": str(e)})
                continue

            for message in response.get("messages") or []:
                messages.append(ChatMessage(
                    channel=name,
                    user=message.get("user"),
                    text=message.get("text") or "",
                    ts=str(message.get("ts") or "0"),
                ))

        logger.log_provider_call("slack", "fetch_messages", "success", {"messages": len(messages)})
        return messages


def format_message_dump(messages: Sequence[ChatMessage]) -> str:
    """One '[channel @ local time] text' line per message."""
    lines = []
    for message in messages:
        try:
            when = datetime.fromtimestamp(float(message.ts)).strftime("%Y-%m-%d %H:%M:%S")
        except (TypeError, ValueError):
            when = message.ts
        lines.append(f"[{message.channel} @ {when}] {message.text}")
    return "\n".join(lines)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return "\n".join(str(item) for item in value)
    return str(value)


def parse_chat_digest(raw: str) -> ChatDigest:
    """Parse the JSON digest, falling back to the raw text as the summary."""
    text = raw.strip()
    fenced = CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except ValueError:
        return ChatDigest(summary=raw.strip(), actions="")

    if not isinstance(data, dict):
        return ChatDigest(summary=raw.strip(), actions="")
    return ChatDigest(summary=_as_text(data.get("summary")), actions=_as_text(data.get("actions")))


def summarize_chat_activity(messages: Sequence[ChatMessage],
                            completion_provider: ICompletionProvider) -> ChatDigest:
    """
    Summarize chat messages into a digest.

    Returns:
        ChatDigest; placeholder text when there is no activity or the
        provider fails
    """
    if not messages:
        return ChatDigest(summary=NO_ACTIVITY_SUMMARY, actions="")

    prompt = build_chat_digest_prompt(format_message_dump(messages))
    try:
        response = completion_provider.complete(prompt)
    except Exception as e:
        logger.log_provider_call("completion", "chat_digest", "failed", {"error": str(e)})
        response = None

    if not isinstance(response, str) or not response.strip():
        return ChatDigest(summary=CHAT_ERROR_SUMMARY, actions="")

    digest = parse_chat_digest(response)
    logger.log_operation("chat.digest", "success", {"messages": len(messages),
                                                    "summary_length": len(digest.summary)})
    return digest
