"""Process entry point: ingest the ECB feed once, then serve the read API."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Sequence

import uvicorn

from ecb_rates import EcbRates
from ecb_rates.api import create_app
from ecb_rates.exceptions import EcbRatesError
from ecb_rates.ingestion.ecb_client import DEFAULT_FEED, ECB_FEED_URLS, ECBFeedClient
from ecb_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


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
    )
    parser.add_argument("--host", default=os.environ.get("ECB_RATES_HOST", "127.0.0.1"))
    parser.add_argument(
        "--port", type=int, default=int(os.environ.get("ECB_RATES_PORT", "3000"))
    )
    parser.add_argument("--timeout", type=float, default=30.0, help="Feed download timeout")
    parser.add_argument(
        "--skip-seed",
        action="store_true",
        help="Serve whatever is already stored without fetching the feed",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        rates = EcbRates(args.db_url)
    except (ValueError, EcbRatesError) as exc:
        LOGGER.error("Invalid database configuration, not serving: %s", exc)
        return 1
    try:
        if args.skip_seed:
            rates.backend.ensure_schema()
        else:
            rates.seed(args.feed, client=ECBFeedClient(timeout=args.timeout))
    except EcbRatesError as exc:
        LOGGER.error("Startup ingestion failed, not serving: %s", exc)
        rates.close()
        return 1
    try:
        uvicorn.run(create_app(rates), host=args.host, port=args.port)
    finally:
        rates.close()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
