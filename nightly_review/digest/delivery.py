"""
Digest formatting and delivery: Slack Block Kit via webhook, and SMTP email.
"""

import html
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..core.config import EmailSettings, SlackSettings
from ..core.schema import ChatDigest, SummaryResult
from ..util.logging import logger

EMAIL_SUBJECT = "Nightly Review"


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_slack_blocks(doc_summaries: Sequence[SummaryResult], chat_digest: ChatDigest,
                       channel_id: Optional[str] = None) -> Dict[str, Any]:
    """Build the webhook payload for the combined digest."""
    blocks: List[Dict[str, Any]] = []

    if doc_summaries:
        blocks.append(_section("*📄 Document Summaries*"))
        for result in doc_summaries:
            blocks.append(_section(f"*{result.title}*\n{result.summary}"))
            if result.actions:
                blocks.append(_section(f"*Action Items:*\n{result.actions}"))
            blocks.append({"type": "divider"})
    else:
        blocks.append(_section("*📄 Document Summaries*\n_No changes detected._"))
        blocks.append({"type": "divider"})

    blocks.append(_section("*💬 Slack Summary*"))
    blocks.append(_section(chat_digest.summary))
    if chat_digest.actions:
        blocks.append(_section(f"*Action Items:*\n{chat_digest.actions}"))

    payload: Dict[str, Any] = {"blocks": blocks}
    if channel_id:
        payload["channel"] = channel_id
    return payload


def build_email_body(doc_summaries: Sequence[SummaryResult], chat_digest: ChatDigest) -> Dict[str, str]:
    """
    Build the plain-text and HTML email bodies.

    Returns:
        {"text": ..., "html": ...}
    """
    body = ""
    if doc_summaries:
        body += "📄 *Document Changes*\n\n"
        for result in doc_summaries:
            body += f"{result.title}\n{result.summary}\nAction Items: {result.actions or 'None'}\n\n"
    else:
        body += "📄 No document changes detected.\n\n"

    body += "💬 *Slack Summary*\n"
    body += chat_digest.summary + "\n"
    if chat_digest.actions:
        body += f"\nAction Items:\n{chat_digest.actions}\n"

    return {"text": body, "html": html.escape(body).replace("\n", "<br>")}


class SlackNotifier:
    """Posts digest payloads to a Slack incoming webhook."""

    def __init__(self, settings: SlackSettings, timeout: float = 30.0):
        self.settings = settings
        self.timeout = timeout

    def post(self, payload: Dict[str, Any]) -> bool:
        if not self.settings.webhook_url:
            logger.log_delivery("slack", "skipped", {"reason": "SLACK_WEBHOOK_URL is missing"})
            return False

        try:
            response = requests.post(self.settings.webhook_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.log_delivery("slack", "failed", {"error": str(e)})
            return False

        if response.status_code != 200:
            logger.log_delivery("slack", "failed", {"code": response.status_code, "response": response.text})
            return False

        logger.log_delivery("slack", "sent", {"blocks": len(payload.get("blocks", []))})
        return True


class EmailSender:
    """Sends the digest over SMTP as a multipart/alternative message."""

    def __init__(self, settings: EmailSettings):
        self.settings = settings

    def _missing_settings(self) -> List[str]:
        missing = []
        if not self.settings.smtp_host:
            missing.append("SMTP_HOST")
        if not self.settings.sender:
            missing.append("EMAIL_FROM")
        if not self.settings.recipients:
            missing.append("EMAIL_TO")
        return missing

    def build_message(self, subject: str, text: str, html_body: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.settings.sender
        message["To"] = ", ".join(self.settings.recipients)
        message["Date"] = formatdate(localtime=True)
        message.attach(MIMEText(text, "plain", "utf-8"))
        message.attach(MIMEText(html_body, "html", "utf-8"))
        return message

    def send(self, subject: str, text: str, html_body: str) -> bool:
        missing = self._missing_settings()
        if missing:
            logger.log_delivery("email", "skipped", {"missing": missing})
            return False

        message = self.build_message(subject, text, html_body)
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port) as server:
                if self.settings.use_tls:
                    server.starttls()
                if self.settings.username and self.settings.password:
                    server.login(self.settings.username, self.settings.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.log_delivery("email", "failed", {"error": str(e)})
            return False

        logger.log_delivery("email", "sent", {"recipients": len(self.settings.recipients)})
        return True
