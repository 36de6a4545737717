import argparse
import json
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional, Sequence

from tradie_mail.assistant.openai_assistant import OpenAIAssistant
from tradie_mail.config.logging_setup import configure_logging
from tradie_mail.config.settings import load_settings
from tradie_mail.digest.aggregator import digest_for_window
from tradie_mail.models import DateRange, parse_timestamp
from tradie_mail.rules.corpus import corpus_for
from tradie_mail.rules.scoring import utcnow
from tradie_mail.storage.inbox_file import load_emails, load_preferences

logger = logging.getLogger("morning_digest")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the morning email digest from an inbox export.")
    parser.add_argument("inbox", type=Path, help="JSON file with a list of email summaries")
    parser.add_argument("--preferences", type=Path, default=None, help="JSON file with user email preferences")
    parser.add_argument("--from", dest="start", default=None, help="ISO-8601 start (default: 24h ago)")
    parser.add_argument("--to", dest="end", default=None, help="ISO-8601 end (default: now)")
    parser.add_argument("--no-assistant", action="store_true", help="Use rule-based analysis only")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level, settings.logs_dir)

    now = utcnow()
    start = parse_timestamp(args.start) if args.start else now - timedelta(hours=24)
    end = parse_timestamp(args.end) if args.end else now
    if start is None or end is None:
        logger.error("--from/--to must be ISO-8601 timestamps")
        return 2

    try:
        emails = load_emails(args.inbox)
        preferences = load_preferences(args.preferences) if args.preferences else None
    except (OSError, ValueError) as exc:
        logger.error("Could not read input: %s", exc)
        return 1

    assistant = None if args.no_assistant else OpenAIAssistant.from_settings(settings)

    digest = digest_for_window(
        emails,
        DateRange(start=start, end=end),
        preferences,
        assistant=assistant,
        corpus=corpus_for(settings.industry, settings.locale),
        now=now,
        timeout=settings.assistant_timeout,
    )
    json.dump(digest.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
