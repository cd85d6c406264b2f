#!/usr/bin/env python3
"""
Nightly Review Runner
Summarizes changed document chunks, digests Slack activity and delivers both.
Meant to be invoked once per night by cron or a similar scheduler.
"""

import argparse
import sys
from pathlib import Path

# Load environment variables from .env file first
import dotenv
dotenv.load_dotenv()

sys.path.insert(0, str(Path(__file__).parent.parent))

from nightly_review.core.config import load_config, validate_config
from nightly_review.core.runner import run_nightly_review
from nightly_review.llm.ollama_client import check_ollama_health


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run one nightly review")
    parser.add_argument("--doc-id", action="append", dest="doc_ids",
                        help="Document id to process (repeatable, overrides DOC_IDS)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Build the digest without posting to Slack or sending email")
    parser.add_argument("--skip-chat", action="store_true",
                        help="Do not fetch Slack activity")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the nightly review and print what was produced."""
    args = parse_args(argv)
    config = load_config()

    for issue in validate_config(config):
        print(f"WARNING: {issue}")

    if config.completion_provider == "ollama" and not check_ollama_health():
        print("WARNING: Ollama service is not answering; chunk summaries will fall back to placeholders")

    doc_ids = args.doc_ids if args.doc_ids else config.doc_ids
    print(f"Starting nightly review for {len(doc_ids)} document(s)...")

    outcome = run_nightly_review(config, doc_ids=doc_ids, dry_run=args.dry_run,
                                 skip_chat=args.skip_chat)

    print(f"📄 {len(outcome.doc_summaries)} chunk summary(ies)")
    for result in outcome.doc_summaries:
        print(f"  • {result.title}")
        print(f"    {result.summary}")
        print(f"    Action Items: {result.actions}")

    print(f"💬 Slack: {outcome.chat_digest.summary}")

    if args.dry_run:
        print("Dry run: nothing delivered")
    else:
        print(f"{'✓' if outcome.slack_sent else '✗'} Slack post")
        print(f"{'✓' if outcome.email_sent else '✗'} Email")

    print("Nightly review complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
