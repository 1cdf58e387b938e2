"""
Shared test fixtures for the DSNP resolver tests.

The chain is faked at the FrequencyConnection boundary: storage values,
control keys and itemized-storage payloads are plain dictionaries, so tests
describe chain state directly instead of JSON-RPC traffic.
"""

from io import BytesIO
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
from fastavro import schemaless_writer

from org.dsnp.frequency.chain.client import FrequencyConnection
from org.dsnp.frequency.chain.storage import (
    DISPLAY_NAME_PREFIX,
    KEY_COUNT_PREFIX,
    storage_key,
)
from org.dsnp.frequency.resolve.payload import PARSED_PUBLIC_KEY_SCHEMA
from org.dsnp.frequency.resolve.schema import MAINNET_GENESIS_HASH

ALICE_SS58 = "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"
ALICE_PUBLIC_KEY = bytes.fromhex(
    "d43593c715fdd31c61141abd04a99fd6822c8558854ccde39a5684e7a56da27d"
)
BOB_SS58 = "5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty"
BOB_PUBLIC_KEY = bytes.fromhex(
    "8eaf04151687736326c9fea17e25fc5287613693c912909cb226aa4794f26a48"
)


def public_key_payload(public_key: bytes) -> bytes:
    """Avro-encode a PublicKey record the way DSNP clients store it."""
    buffer = BytesIO()
    schemaless_writer(buffer, PARSED_PUBLIC_KEY_SCHEMA, {"publicKey": public_key})
    return buffer.getvalue()


def display_name_value(handle: str, block_number: int = 1234) -> bytes:
    """SCALE-encode a (handle, block number) display name value."""
    encoded = handle.encode("utf-8")
    assert len(encoded) < 64, "single-byte compact length only"
    return bytes([len(encoded) << 2]) + encoded + block_number.to_bytes(4, "little")


def make_connection(
    key_counts: Optional[Dict[int, int]] = None,
    handles: Optional[Dict[int, str]] = None,
    msa_keys: Optional[Dict[int, List[bytes]]] = None,
    itemized: Optional[Dict[Tuple[int, int], List[bytes]]] = None,
    genesis_hash: str = MAINNET_GENESIS_HASH,
) -> AsyncMock:
    """Build a fake FrequencyConnection serving the given chain state."""
    storage: Dict[str, bytes] = {}
    for msa_id, count in (key_counts or {}).items():
        storage[storage_key(KEY_COUNT_PREFIX, msa_id)] = bytes([count])
    for msa_id, handle in (handles or {}).items():
        storage[storage_key(DISPLAY_NAME_PREFIX, msa_id)] = display_name_value(handle)

    connection = AsyncMock(spec=FrequencyConnection)
    connection.closed = False
    connection.genesis_hash = genesis_hash
    connection.get_storage.side_effect = lambda key: storage.get(key)
    connection.get_keys_by_msa_id.side_effect = lambda msa_id: list(
        (msa_keys or {}).get(msa_id, [])
    )
    connection.get_itemized_storage.side_effect = lambda msa_id, schema_id: list(
        (itemized or {}).get((msa_id, schema_id), [])
    )
    connection.get_schema_versions.return_value = []
    return connection


@pytest.fixture
def chain_env(monkeypatch, tmp_path):
    """Isolate settings from the developer's environment and .env file."""
    for name in (
        "FREQUENCY_NODE",
        "PROVIDER_URI",
        "FREQUENCY_NETWORK",
        "SCHEMA_STRATEGY",
        "SENTRY_DSN",
        "METRICS_BACKEND",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
