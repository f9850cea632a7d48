"""CLI + helpers for populating (seeding) the rates store from the ECB feed."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Sequence

from ecb_rates.db.base_backend import BackendStrategy, PersistenceResult
from ecb_rates.db.upsert import RateUpserter
from ecb_rates.exceptions import EcbRatesError
from ecb_rates.ingestion.ecb_client import DEFAULT_FEED, ECB_FEED_URLS, ECBFeedClient
from ecb_rates.ingestion.ecb_xml import ECBXMLParser
from ecb_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["seed_ecb_rates", "parse_args", "main"]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--db",
        dest="db_url",
        default=os.environ.get("ECB_RATES_DB_URL"),
        help="Database DSN (defaults to $ECB_RATES_DB_URL or the local SQLite file)",
    )
    parser.add_argument(
        "--feed",
        choices=sorted(ECB_FEED_URLS),
        default=os.environ.get("ECB_RATES_FEED", DEFAULT_FEED),
        help="ECB feed to ingest",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="HTTP timeout in seconds for the feed download",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and parse the feed without writing to the store",
    )
    return parser.parse_args(argv)


def seed_ecb_rates(
    backend: BackendStrategy,
    *,
    feed: str = DEFAULT_FEED,
    client: ECBFeedClient | None = None,
    parser: ECBXMLParser | None = None,
    dry_run: bool = False,
) -> PersistenceResult:
    """Fetch ``feed`` once, parse it and upsert every date into ``backend``.

    The payload is parsed completely before the first write, so a corrupt
    document leaves the store untouched. Fetch, parse and store errors are
    raised to the caller; nothing is retried.
    """

    feed_client = client or ECBFeedClient()
    xml_parser = parser or ECBXMLParser()
    payload = feed_client.fetch(feed)
    candidates = xml_parser.parse(payload)
    LOGGER.info("Parsed %s dated snapshots from the %s feed", len(candidates), feed)
    if dry_run:
        LOGGER.info("Dry-run enabled; skipping writes for %s snapshots", len(candidates))
        return PersistenceResult()
    backend.ensure_schema()
    result = RateUpserter(backend).save_all(candidates)
    LOGGER.info(
        "Seeding finished: inserted %s records, updated %s records (total %s)",
        result.inserted,
        result.updated,
        result.total,
    )
    return result


def main(argv: Sequence[str] | None = None) -> int:
    from ecb_rates import EcbRates

    args = parse_args(argv)
    try:
        with EcbRates(args.db_url) as rates:
            rates.seed(
                args.feed,
                client=ECBFeedClient(timeout=args.timeout),
                dry_run=args.dry_run,
            )
    except EcbRatesError as exc:
        LOGGER.error("Ingestion failed: %s", exc)
        return 1
    except ValueError as exc:
        LOGGER.error("Invalid database configuration: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
