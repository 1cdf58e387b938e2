"""Decoding of DSNP public key records into multibase strings."""

from io import BytesIO
from typing import Any, Dict, Final

from fastavro import parse_schema, schemaless_reader, schemaless_writer
from multiformats import multibase

from org.dsnp.frequency.errors import DecodeError

PUBLIC_KEY_SCHEMA: Final[Dict[str, Any]] = {
    "type": "record",
    "name": "PublicKey",
    "namespace": "org.dsnp",
    "fields": [
        {
            "name": "publicKey",
            "doc": "Multicodec public key",
            "type": "bytes",
        },
    ],
}
"""Avro schema shared by the key agreement and assertion method key records"""

PARSED_PUBLIC_KEY_SCHEMA: Final = parse_schema(PUBLIC_KEY_SCHEMA)

X25519_PUB_MULTICODEC: Final = bytes([0xEC, 0x01])
"""Tag added to untagged 32-byte keys read from itemized storage"""

SR25519_PUB_MULTICODEC: Final = bytes([0xEF, 0x01])
"""Tag for MSA control keys, which are sr25519 account ids"""

UNTAGGED_KEY_LENGTH: Final = 32


def multibase_encode(data: bytes) -> str:
    """Encode bytes as a base58btc multibase string ('z' prefix)."""
    return multibase.encode(data, "base58btc")


def decode_public_key(payload: bytes) -> bytes:
    """Read the raw ``publicKey`` bytes out of an Avro-encoded PublicKey record.

    Raises:
        DecodeError: If the payload is not a complete PublicKey record
    """
    buffer = BytesIO(payload)
    try:
        record = schemaless_reader(buffer, PARSED_PUBLIC_KEY_SCHEMA)
    except Exception as e:
        raise DecodeError("Payload is not a PublicKey record") from e
    # The reader neither rejects short reads nor trailing bytes, so compare
    # against the canonical encoding of what it read.
    canonical = BytesIO()
    schemaless_writer(canonical, PARSED_PUBLIC_KEY_SCHEMA, record)
    if canonical.getvalue() != payload:
        raise DecodeError("Payload is truncated or has trailing data")
    return record["publicKey"]


def decode_key(payload: bytes) -> str:
    """Decode an itemized-storage public key payload into ``publicKeyMultibase``.

    Keys written before keys carried their multicodec are stored as bare
    32-byte x25519 keys; those get the x25519-pub tag. Keys of any other
    length are assumed to be tagged already.
    """
    public_key = decode_public_key(payload)
    # TODO: drop the untagged-key case once all stored keys carry a multicodec.
    if len(public_key) == UNTAGGED_KEY_LENGTH:
        public_key = X25519_PUB_MULTICODEC + public_key
    return multibase_encode(public_key)


def encode_account_key(account_id: bytes) -> str:
    """Encode an MSA control key (sr25519 account id) as ``publicKeyMultibase``."""
    return multibase_encode(SR25519_PUB_MULTICODEC + account_id)
