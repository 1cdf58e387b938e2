"""Resolution of DSNP user ids into DID Documents from Frequency chain state.

A FrequencyResolver owns one connection and the schema ids of the chain it is
connected to; both are set up on first use and reused afterwards. Everything
else is read fresh for every call, so resolving the same id twice against
unchanged chain state gives identical documents.
"""

import asyncio
import logging
from typing import List, Literal, Optional

from aiohttp import ClientSession

from org.dsnp.frequency.chain.client import ConnectionManager, FrequencyConnection
from org.dsnp.frequency.chain.scale import decode_display_name, decode_key_count
from org.dsnp.frequency.chain.storage import (
    DISPLAY_NAME_PREFIX,
    KEY_COUNT_PREFIX,
    storage_key,
)
from org.dsnp.frequency.resolve.document import (
    DIDDocument,
    VerificationMethod,
    handle_did,
)
from org.dsnp.frequency.resolve.payload import decode_key, encode_account_key
from org.dsnp.frequency.resolve.schema import (
    ChainSchemaResolver,
    SchemaIds,
    SchemaResolver,
    StaticSchemaResolver,
)

logger = logging.getLogger(__name__)

SchemaStrategy = Literal["chain", "static"]


def dsnp_did(user_id: int) -> str:
    return f"did:dsnp:{user_id}"


class FrequencyResolver:
    """Resolves DSNP user ids (MSA ids) against a Frequency node.

    Args:
        provider_uri: ws:// or wss:// address of the node
        connection: Pre-built connection to use instead of connecting
        network: Network name, used by the static schema strategy
        schema_strategy: ``chain`` to look schema ids up by genesis hash, or
            ``static`` to use the fixed table for ``network``
        schema_resolver: Custom schema resolver; overrides ``schema_strategy``
        session: Shared HTTP client session for the websocket

    Raises:
        ConfigError: If neither a provider URI nor a connection is given, the
            URI is not a websocket URI, or the network name is unknown
    """

    def __init__(
        self,
        provider_uri: Optional[str] = None,
        connection: Optional[FrequencyConnection] = None,
        network: str = "mainnet",
        schema_strategy: SchemaStrategy = "chain",
        schema_resolver: Optional[SchemaResolver] = None,
        session: Optional[ClientSession] = None,
    ):
        self.connections = ConnectionManager(
            provider_uri=provider_uri, connection=connection, session=session
        )
        static_resolver = StaticSchemaResolver(network)
        if schema_resolver is not None:
            self.schema_resolver = schema_resolver
        elif schema_strategy == "static":
            self.schema_resolver = static_resolver
        else:
            self.schema_resolver = ChainSchemaResolver(self.connections)

        self._schema_ids: Optional[SchemaIds] = None
        self._schema_lock = asyncio.Lock()

    async def disconnect(self) -> None:
        await self.connections.disconnect()

    async def schema_ids(self) -> SchemaIds:
        """Return the schema ids for this chain, looking them up at most once."""
        if self._schema_ids is not None:
            return self._schema_ids
        async with self._schema_lock:
            if self._schema_ids is None:
                self._schema_ids = await self.schema_resolver.resolve_schema_ids()
                logger.debug("Resolved schema ids %s", self._schema_ids)
            return self._schema_ids

    async def resolve(self, user_id: int) -> Optional[DIDDocument]:
        """Build the DID Document for a DSNP user id.

        Returns:
            The document, or None if the id has no MSA on this chain

        Raises:
            ValueError: If ``user_id`` is not an unsigned 64-bit integer
            ChainConnectionError: If the node cannot be reached
            RpcError: If the node rejects a read
            DecodeError: If a key read from the chain cannot be decoded
        """
        key_count_key = storage_key(KEY_COUNT_PREFIX, user_id)

        schema_ids = await self.schema_ids()
        connection = await self.connections.acquire()

        key_count = await connection.get_storage(key_count_key)
        if key_count is None or decode_key_count(key_count) == 0:
            logger.debug("MSA %d has no public keys", user_id)
            return None

        controller = dsnp_did(user_id)

        authentication = [
            VerificationMethod.for_key(controller, encode_account_key(account_id))
            for account_id in await connection.get_keys_by_msa_id(user_id)
        ]

        also_known_as: List[str] = []
        display_name = await connection.get_storage(
            storage_key(DISPLAY_NAME_PREFIX, user_id)
        )
        if display_name is not None:
            handle = decode_display_name(display_name)
            if handle is not None:
                also_known_as.append(handle_did(handle))

        assertion_method = await self._verification_methods(
            connection, controller, user_id, schema_ids.assertion_method
        )
        key_agreement = await self._verification_methods(
            connection, controller, user_id, schema_ids.key_agreement
        )

        return DIDDocument(
            id=controller,
            authentication=authentication,
            assertion_method=assertion_method,
            key_agreement=key_agreement,
            also_known_as=also_known_as,
        )

    async def _verification_methods(
        self,
        connection: FrequencyConnection,
        controller: str,
        user_id: int,
        schema_id: Optional[int],
    ) -> List[VerificationMethod]:
        if schema_id is None:
            return []
        payloads = await connection.get_itemized_storage(user_id, schema_id)
        return [
            VerificationMethod.for_key(controller, decode_key(payload))
            for payload in payloads
        ]
