"""Websocket JSON-RPC access to a Frequency node.

A single connection is opened lazily by the ConnectionManager and reused for
every read. Requests on a connection are serialized: each call sends one
request and reads frames until the response with the matching id arrives, so
no background reader task is needed.

There is no request timeout of its own; calls wait as long as the underlying
websocket does. Callers that need cancellation wrap calls themselves.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import aiohttp
from aiohttp import ClientSession, ClientWebSocketResponse, WSMsgType

from org.dsnp.frequency.chain.scale import (
    decode_account_id,
    decode_byte_array,
    hex_to_bytes,
)
from org.dsnp.frequency.errors import (
    ChainConnectionError,
    ConfigError,
    DecodeError,
    ResolverError,
    RpcError,
)

logger = logging.getLogger(__name__)

WEBSOCKET_SCHEMES = ("ws", "wss")


def validate_provider_uri(provider_uri: Optional[str]) -> str:
    """Check that a provider URI is a websocket URI with a host.

    Raises:
        ConfigError: If the URI is missing or not a ws:// or wss:// URI
    """
    if not provider_uri:
        raise ConfigError("A Frequency provider URI is required")
    parsed = urlparse(provider_uri)
    if parsed.scheme not in WEBSOCKET_SCHEMES or not parsed.netloc:
        raise ConfigError(
            f"Provider URI {provider_uri!r} must be a ws:// or wss:// URI"
        )
    return provider_uri


class FrequencyConnection:
    """JSON-RPC 2.0 over one websocket to a Frequency node."""

    def __init__(
        self,
        session: ClientSession,
        websocket: ClientWebSocketResponse,
        owns_session: bool = True,
    ):
        self._session = session
        self._websocket = websocket
        self._owns_session = owns_session
        self._lock = asyncio.Lock()
        self._request_id = 0
        self.genesis_hash: Optional[str] = None

    @staticmethod
    async def connect(
        provider_uri: str, session: Optional[ClientSession] = None
    ) -> "FrequencyConnection":
        """Open a websocket to the node and perform the handshake.

        The handshake reads the genesis block hash, which identifies the chain
        for schema lookups. A connection is only returned once it succeeds.

        Args:
            provider_uri: ws:// or wss:// address of the node
            session: Optional shared HTTP client session; one is created and
                owned by the connection if not given

        Returns:
            A connected FrequencyConnection

        Raises:
            ChainConnectionError: If the socket cannot be opened or the node
                does not answer the handshake
        """
        owns_session = session is None
        if session is None:
            session = ClientSession()

        try:
            websocket = await session.ws_connect(provider_uri)
        except (aiohttp.ClientError, OSError) as e:
            if owns_session:
                await session.close()
            raise ChainConnectionError(
                f"Unable to connect to Frequency node at {provider_uri}"
            ) from e

        connection = FrequencyConnection(session, websocket, owns_session)
        try:
            connection.genesis_hash = await connection.rpc("chain_getBlockHash", [0])
        except ResolverError as e:
            await connection.disconnect()
            raise ChainConnectionError(
                f"Handshake with Frequency node at {provider_uri} failed"
            ) from e

        if not isinstance(connection.genesis_hash, str):
            await connection.disconnect()
            raise ChainConnectionError(
                f"Frequency node at {provider_uri} returned no genesis hash"
            )

        logger.debug(
            "Connected to %s with genesis hash %s", provider_uri, connection.genesis_hash
        )
        return connection

    @property
    def closed(self) -> bool:
        return self._websocket.closed

    async def disconnect(self) -> None:
        await self._websocket.close()
        if self._owns_session:
            await self._session.close()

    async def rpc(self, method: str, params: List[Any]) -> Any:
        """Call a JSON-RPC method and return its result.

        Raises:
            RpcError: If the node returns an error object
            ChainConnectionError: If the websocket closes or fails mid-call
        """
        async with self._lock:
            self._request_id += 1
            request_id = self._request_id
            request = {
                "jsonrpc": "2.0",
                "id": request_id,
                "method": method,
                "params": params,
            }

            try:
                await self._websocket.send_str(json.dumps(request))
                while True:
                    message = await self._websocket.receive()
                    if message.type in (
                        WSMsgType.CLOSE,
                        WSMsgType.CLOSING,
                        WSMsgType.CLOSED,
                        WSMsgType.ERROR,
                    ):
                        raise ChainConnectionError(
                            f"Websocket closed while waiting for {method}"
                        )
                    if message.type != WSMsgType.TEXT:
                        continue

                    body = json.loads(message.data)
                    if not isinstance(body, dict):
                        raise DecodeError(
                            f"Response to {method} is not a JSON-RPC object"
                        )
                    if body.get("id") != request_id:
                        logger.debug("Skipping unrelated message %s", body)
                        continue

                    error = body.get("error")
                    if error is not None:
                        raise RpcError(
                            method,
                            error.get("code"),
                            error.get("message", ""),
                            error.get("data"),
                        )
                    return body.get("result")
            except (aiohttp.ClientError, ConnectionResetError) as e:
                raise ChainConnectionError(f"Websocket failed during {method}") from e
            except json.JSONDecodeError as e:
                raise DecodeError(f"Malformed JSON-RPC response to {method}") from e

    async def get_storage(self, key: str) -> Optional[bytes]:
        """Read a raw storage value; None if the key holds nothing."""
        result = await self.rpc("state_getStorage", [key])
        if result is None:
            return None
        return hex_to_bytes(result)

    async def get_keys_by_msa_id(self, msa_id: int) -> List[bytes]:
        """Return the raw control keys of an MSA, in chain order."""
        result = await self.rpc("msa_getKeysByMsaId", [msa_id])
        if result is None:
            return []
        return [decode_account_id(key) for key in result.get("msa_keys", [])]

    async def get_itemized_storage(self, msa_id: int, schema_id: int) -> List[bytes]:
        """Return the payload of every itemized-storage item for (msa_id, schema_id)."""
        result = await self.rpc(
            "statefulStorage_getItemizedStorage", [msa_id, schema_id]
        )
        if result is None:
            return []
        return [decode_byte_array(item["payload"]) for item in result.get("items", [])]

    async def get_schema_versions(self, schema_name: str) -> List[Dict[str, Any]]:
        """Return the registered versions of a named schema; empty if unknown."""
        result = await self.rpc("schemas_getVersions", [schema_name])
        return result or []


class ConnectionManager:
    """Owns the single lazily-created connection used by a resolver.

    Either a provider URI or a pre-built connection must be given. First use
    is serialized so concurrent callers share one connection.
    """

    def __init__(
        self,
        provider_uri: Optional[str] = None,
        connection: Optional[FrequencyConnection] = None,
        session: Optional[ClientSession] = None,
    ):
        if provider_uri is None and connection is None:
            raise ConfigError("provider_uri or connection is required")
        self.provider_uri = (
            validate_provider_uri(provider_uri) if provider_uri is not None else None
        )
        self._connection = connection
        self._session = session
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._connection is not None and not self._connection.closed

    async def acquire(self) -> FrequencyConnection:
        """Return the cached connection, connecting first if there is none.

        A cached connection the node has closed is disconnected and replaced.

        Raises:
            ChainConnectionError: If connecting fails; nothing is cached, so a
                later call tries again
        """
        connection = self._connection
        if connection is not None and not connection.closed:
            return connection

        async with self._lock:
            if self._connection is not None:
                if not self._connection.closed:
                    return self._connection
                stale, self._connection = self._connection, None
                logger.debug("Connection to %s was closed", self.provider_uri)
                await stale.disconnect()
            if self.provider_uri is None:
                raise ChainConnectionError(
                    "Connection is closed and no provider URI is configured"
                )
            self._connection = await FrequencyConnection.connect(
                self.provider_uri, self._session
            )
            return self._connection

    async def disconnect(self) -> None:
        """Close the connection if there is one; a later acquire() reconnects."""
        async with self._lock:
            if self._connection is None:
                return
            connection, self._connection = self._connection, None
            await connection.disconnect()
            logger.debug("Disconnected from %s", self.provider_uri)
