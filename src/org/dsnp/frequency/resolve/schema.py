"""Lookup of the chain-specific schema ids for DSNP public key records.

Frequency identifies record layouts by small integer schema ids that differ
between chains. Two strategies are provided:

- ChainSchemaResolver looks ids up by the connected chain's genesis hash,
  asking the chain itself for chains it does not know.
- StaticSchemaResolver maps a network name to fixed ids. It never reports a
  schema as missing, so it is only correct while the table matches the
  chain's registrations.
"""

import logging
from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Dict, Final, Literal, Mapping, NamedTuple, Optional, Tuple

from org.dsnp.frequency.chain.client import ConnectionManager
from org.dsnp.frequency.errors import ConfigError, RpcError

logger = logging.getLogger(__name__)

Network = Literal["local", "testnet", "mainnet"]
NETWORKS: Final[Tuple[str, ...]] = ("local", "testnet", "mainnet")


class SchemaPurpose(StrEnum):
    """Logical purposes of the public key records read by the resolver."""

    key_agreement = "public-key-key-agreement"
    assertion_method = "public-key-assertion-method"


KEY_AGREEMENT_VERSION: Final = "1.2"
ASSERTION_METHOD_VERSION: Final = "1.3"

MAINNET_GENESIS_HASH: Final = (
    "0x4a587bf17a404e3572747add7aab7bbe56e805a5479c6c436f07f36fcc8d3ae1"
)
TESTNET_GENESIS_HASH: Final = (
    "0x203c6838fc78ea3660a2f298a58d859519c72a5efdc0f194abd6f0d5ce1838e0"
)

SchemaKey = Tuple[SchemaPurpose, str]

MAINNET_SCHEMA_IDS: Final[Dict[SchemaKey, int]] = {
    (SchemaPurpose.key_agreement, KEY_AGREEMENT_VERSION): 7,
    (SchemaPurpose.assertion_method, ASSERTION_METHOD_VERSION): 12,
}

TESTNET_SCHEMA_IDS: Final[Dict[SchemaKey, int]] = {
    (SchemaPurpose.key_agreement, KEY_AGREEMENT_VERSION): 18,
    (SchemaPurpose.assertion_method, ASSERTION_METHOD_VERSION): 20,
}

KNOWN_SCHEMA_IDS: Dict[str, Dict[SchemaKey, int]] = {
    MAINNET_GENESIS_HASH: MAINNET_SCHEMA_IDS,
    TESTNET_GENESIS_HASH: TESTNET_SCHEMA_IDS,
}
"""Schema ids per chain, keyed by genesis hash"""


class SchemaIds(NamedTuple):
    """Schema ids of the two public key purposes; None where the chain has none."""

    key_agreement: Optional[int]
    assertion_method: Optional[int]


def register_schema_ids(genesis_hash: str, schema_ids: Mapping[SchemaKey, int]) -> None:
    """Add or replace the schema ids known for the chain with ``genesis_hash``."""
    KNOWN_SCHEMA_IDS[genesis_hash.lower()] = dict(schema_ids)


def chain_schema_name(purpose: SchemaPurpose) -> str:
    """Return the name under which a DSNP schema is registered on chain."""
    return f"dsnp.{purpose.value}"


class SchemaResolver(ABC):
    """Maps a schema purpose and version to a schema id on the connected chain."""

    @abstractmethod
    async def resolve_schema_id(
        self, purpose: SchemaPurpose, version: Optional[str] = None
    ) -> Optional[int]:
        """Return the schema id, or None if the chain has no such schema."""

    async def resolve_schema_ids(self) -> SchemaIds:
        return SchemaIds(
            key_agreement=await self.resolve_schema_id(
                SchemaPurpose.key_agreement, KEY_AGREEMENT_VERSION
            ),
            assertion_method=await self.resolve_schema_id(
                SchemaPurpose.assertion_method, ASSERTION_METHOD_VERSION
            ),
        )


class ChainSchemaResolver(SchemaResolver):
    """Resolves schema ids for the chain identified by its genesis hash.

    Chains listed in KNOWN_SCHEMA_IDS are answered from that table. For any
    other chain (local development chains, for example) the chain is asked for
    the registered versions of the schema name and the most recent one is
    used. A schema that cannot be found is reported as None.
    """

    def __init__(self, connections: ConnectionManager):
        self.connections = connections

    async def resolve_schema_id(
        self, purpose: SchemaPurpose, version: Optional[str] = None
    ) -> Optional[int]:
        """Return the schema id for a purpose on the connected chain.

        ``version`` selects an entry of KNOWN_SCHEMA_IDS and only applies to
        chains listed there. Versions registered on other chains are chain
        schema versions, not DSNP versions, so for those chains ``version`` is
        ignored and the most recently registered schema is returned.
        """
        connection = await self.connections.acquire()
        genesis_hash = (connection.genesis_hash or "").lower()

        known = KNOWN_SCHEMA_IDS.get(genesis_hash)
        if known is not None:
            if version is not None:
                return known.get((purpose, version))
            versions = [
                schema_id for (p, _), schema_id in known.items() if p == purpose
            ]
            return max(versions, default=None)

        try:
            registered = await connection.get_schema_versions(chain_schema_name(purpose))
        except RpcError:
            logger.debug(
                "Chain %s cannot list versions of %s", genesis_hash, purpose.value
            )
            return None

        latest = max(
            registered, key=lambda entry: entry.get("schema_version", 0), default=None
        )
        if latest is None:
            logger.debug("Chain %s has no %s schema", genesis_hash, purpose.value)
            return None
        return latest.get("schema_id")


STATIC_SCHEMA_IDS: Final[Dict[str, SchemaIds]] = {
    "testnet": SchemaIds(
        key_agreement=TESTNET_SCHEMA_IDS[
            (SchemaPurpose.key_agreement, KEY_AGREEMENT_VERSION)
        ],
        assertion_method=TESTNET_SCHEMA_IDS[
            (SchemaPurpose.assertion_method, ASSERTION_METHOD_VERSION)
        ],
    ),
    "mainnet": SchemaIds(
        key_agreement=MAINNET_SCHEMA_IDS[
            (SchemaPurpose.key_agreement, KEY_AGREEMENT_VERSION)
        ],
        assertion_method=MAINNET_SCHEMA_IDS[
            (SchemaPurpose.assertion_method, ASSERTION_METHOD_VERSION)
        ],
    ),
}


class StaticSchemaResolver(SchemaResolver):
    """Resolves schema ids from a fixed table keyed by network name.

    ``testnet`` has its own ids; every other network uses the mainnet ids.
    """

    def __init__(self, network: str):
        if network not in NETWORKS:
            raise ConfigError(
                f"Network {network!r} must be one of: {', '.join(NETWORKS)}"
            )
        self.network = network
        self.schema_ids = STATIC_SCHEMA_IDS.get(network, STATIC_SCHEMA_IDS["mainnet"])

    async def resolve_schema_id(
        self, purpose: SchemaPurpose, version: Optional[str] = None
    ) -> Optional[int]:
        """Return the table id for a purpose; the table holds one version each."""
        if purpose == SchemaPurpose.key_agreement:
            return self.schema_ids.key_agreement
        return self.schema_ids.assertion_method
