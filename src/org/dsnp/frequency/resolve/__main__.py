from typing import List, Optional
import argparse
import asyncio
import json
import logging

import sentry_sdk

from org.dsnp.frequency.app.cli import configure_logging
from org.dsnp.frequency.app.config import load_settings
from org.dsnp.frequency.errors import ConfigError, ResolverError
from org.dsnp.frequency.resolve.registry import DSNPDIDResolver

logger = logging.getLogger(__name__)


def subject_to_did(subject: str) -> str:
    """Accept either a did:dsnp DID or a bare user id."""
    subject = subject.strip()
    if subject.isdigit():
        return f"did:dsnp:{subject}"
    return subject


async def realMain(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dsnp-resolve", description="Resolve did:dsnp DIDs against Frequency"
    )
    parser.add_argument(
        "subject", nargs="+", help="The DID(s) or DSNP user id(s) to resolve."
    )
    parser.add_argument(
        "--provider-uri",
        help="Websocket address of the Frequency node. Defaults to FREQUENCY_NODE.",
    )
    parser.add_argument(
        "--network",
        choices=["local", "testnet", "mainnet"],
        help="Frequency network. Defaults to FREQUENCY_NETWORK.",
    )
    parser.add_argument(
        "--schema-strategy",
        choices=["chain", "static"],
        help="How to find schema ids. Defaults to SCHEMA_STRATEGY or chain.",
    )

    args = vars(parser.parse_args(argv))

    overrides = {
        "frequency_node": args.get("provider_uri"),
        "frequency_network": args.get("network"),
        "schema_strategy": args.get("schema_strategy"),
    }
    try:
        settings = load_settings(
            **{key: value for key, value in overrides.items() if value is not None}
        )
    except ConfigError as e:
        parser.error(str(e))

    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn)

    subjects: List[str] = args.get("subject", [])
    resolver = settings.create_resolver()
    did_resolver = DSNPDIDResolver([resolver])

    failures = 0
    try:
        for subject in subjects:
            did = subject_to_did(subject)
            try:
                result = await did_resolver.resolve(did)
                print(json.dumps(result.to_json(), indent=2))
            except ResolverError as e:
                failures += 1
                sentry_sdk.capture_exception(e)
                logger.exception("Exception resolving subject %s", did)
    finally:
        await resolver.disconnect()

    return 1 if failures else 0


def main() -> None:
    configure_logging("WARNING")
    raise SystemExit(asyncio.run(realMain()))


if __name__ == "__main__":
    main()
