"""
Nightly review run: summarize every configured document, digest chat
activity and deliver the result. A run always completes.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import ReviewConfig, get_completion_provider
from .schema import ChatDigest, SummaryResult
from .summarizer import DeltaSummarizer
from ..digest.chat import NO_ACTIVITY_SUMMARY, SlackClient, summarize_chat_activity
from ..digest.delivery import (EMAIL_SUBJECT, EmailSender, SlackNotifier, build_email_body,
                               build_slack_blocks)
from ..llm.completion import ICompletionProvider
from ..util.logging import logger


@dataclass
class ReviewOutcome:
    doc_summaries: List[SummaryResult] = field(default_factory=list)
    chat_digest: ChatDigest = field(default_factory=lambda: ChatDigest(summary=NO_ACTIVITY_SUMMARY))
    slack_sent: bool = False
    email_sent: bool = False


def build_chat_digest(config: ReviewConfig, completion_provider: ICompletionProvider,
                      slack_client: Optional[SlackClient] = None) -> ChatDigest:
    """Fetch the last 24 hours of Slack activity and summarize it."""
    if slack_client is None:
        if not config.slack.bot_token:
            logger.info("SLACK_BOT_TOKEN not set, skipping chat digest")
            return ChatDigest(summary=NO_ACTIVITY_SUMMARY, actions="")
        slack_client = SlackClient(config.slack, timeout=config.http_timeout_sec)

    messages = slack_client.fetch_messages_since()
    return summarize_chat_activity(messages, completion_provider)


def run_nightly_review(config: ReviewConfig, doc_ids: Optional[Sequence[str]] = None,
                       summarizer: Optional[DeltaSummarizer] = None,
                       slack_client: Optional[SlackClient] = None,
                       notifier: Optional[SlackNotifier] = None,
                       email_sender: Optional[EmailSender] = None,
                       dry_run: bool = False, skip_chat: bool = False) -> ReviewOutcome:
    """
    Run one nightly review.

    Args:
        config: Run configuration
        doc_ids: Documents to process, defaults to config.doc_ids
        summarizer, slack_client, notifier, email_sender: Injected collaborators
        dry_run: Build the digest but do not deliver it
        skip_chat: Do not fetch Slack activity

    Returns:
        ReviewOutcome with the summaries, the chat digest and delivery flags
    """
    logger.set_debug(config.debug)
    logger.log_operation("review.run", "started", {"dry_run": dry_run, "skip_chat": skip_chat})

    if summarizer is None:
        try:
            summarizer = DeltaSummarizer.from_config(config)
        except Exception as e:
            # No documents this run, the digest still goes out
            logger.log_operation("review.setup", "failed", {"error": str(e)})

    outcome = ReviewOutcome()
    if summarizer is not None:
        for doc_id in (config.doc_ids if doc_ids is None else list(doc_ids)):
            try:
                outcome.doc_summaries.extend(summarizer.summarize_document(doc_id))
            except Exception as e:
                logger.log_operation("review.document", "failed", {"document_id": doc_id, "error": str(e)})

    if not skip_chat:
        try:
            provider = summarizer.completion_provider if summarizer is not None else \
                get_completion_provider(config)
            outcome.chat_digest = build_chat_digest(config, provider, slack_client)
        except Exception as e:
            logger.log_operation("review.chat", "failed", {"error": str(e)})

    if dry_run:
        logger.log_operation("review.run", "success", {"summaries": len(outcome.doc_summaries),
                                                       "delivered": False})
        return outcome

    notifier = notifier or SlackNotifier(config.slack, timeout=config.http_timeout_sec)
    outcome.slack_sent = notifier.post(build_slack_blocks(outcome.doc_summaries, outcome.chat_digest,
                                                          config.slack.channel_id))

    email_sender = email_sender or EmailSender(config.email)
    body = build_email_body(outcome.doc_summaries, outcome.chat_digest)
    outcome.email_sent = email_sender.send(EMAIL_SUBJECT, body["text"], body["html"])

    logger.log_operation("review.run", "success", {
        "summaries": len(outcome.doc_summaries),
        "slack_sent": outcome.slack_sent,
        "email_sent": outcome.email_sent
    })
    return outcome
