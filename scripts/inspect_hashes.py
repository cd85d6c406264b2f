#!/usr/bin/env python3
"""
Hash Store Inspector
Lists the persisted chunk hashes of a document, or clears them so the next
run re-summarizes every chunk.
"""

import argparse
import sys
from pathlib import Path

# Load environment variables from .env file first
import dotenv
dotenv.load_dotenv()

sys.path.insert(0, str(Path(__file__).parent.parent))

from nightly_review.core.config import get_hash_store, load_config


def main(argv=None):
    parser = argparse.ArgumentParser(description="Inspect persisted chunk hashes")
    parser.add_argument("doc_id", metavar="DOC_ID", help="Document id")
    parser.add_argument("--clear", action="store_true", help="Delete the document's hashes")
    args = parser.parse_args(argv)

    store = get_hash_store(load_config())

    if args.clear:
        store.clear(args.doc_id)
        print(f"✓ Cleared hashes for {args.doc_id}")
        return 0

    entries = store.list_entries(args.doc_id)
    if not entries:
        print(f"No hashes stored for {args.doc_id}")
        return 0

    print(f"Found {len(entries)} chunk hash(es) for {args.doc_id}")
    for entry in entries:
        print(f"  {entry.content_hash[:12]}  {entry.timestamp.isoformat()}  {entry.chunk_title}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
