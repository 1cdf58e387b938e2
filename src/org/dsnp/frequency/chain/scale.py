"""Decoding of SCALE-encoded values read from Frequency storage and RPC results."""

import hashlib
import logging
from typing import Any, Final, Optional, Tuple

import base58

from org.dsnp.frequency.errors import DecodeError

logger = logging.getLogger(__name__)

ACCOUNT_ID_BYTES: Final = 32
SS58_CHECKSUM_BYTES: Final = 2
SS58_PREFIX: Final = b"SS58PRE"
BLOCK_NUMBER_BYTES: Final = 4


def hex_to_bytes(value: str) -> bytes:
    """Decode a ``0x``-prefixed hex string.

    Raises:
        DecodeError: If the value is not valid hex
    """
    try:
        return bytes.fromhex(value.removeprefix("0x"))
    except ValueError as e:
        raise DecodeError(f"Invalid hex value {value!r}") from e


def decode_compact(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Decode a SCALE compact unsigned integer.

    Args:
        data: Encoded bytes
        offset: Position of the first byte of the compact integer

    Returns:
        Tuple of the decoded value and the offset just past it

    Raises:
        DecodeError: If the data ends before the integer does
    """
    if offset >= len(data):
        raise DecodeError("Compact integer is missing")
    mode = data[offset] & 0b11
    if mode == 0b00:
        return data[offset] >> 2, offset + 1
    if mode == 0b01:
        width = 2
    elif mode == 0b10:
        width = 4
    else:
        width = (data[offset] >> 2) + 4
        offset += 1
    if offset + width > len(data):
        raise DecodeError("Compact integer is truncated")
    value = int.from_bytes(data[offset : offset + width], "little")
    if mode != 0b11:
        value >>= 2
    return value, offset + width


def decode_key_count(data: bytes) -> int:
    """Decode the little-endian public key count stored for an MSA."""
    return int.from_bytes(data, "little")


def decode_display_name(data: bytes) -> Optional[str]:
    """Decode a handle stored as (compact-length bytes, u32 block number).

    Returns:
        The handle text, or None if the value is empty or malformed
    """
    try:
        length, offset = decode_compact(data)
    except DecodeError:
        logger.warning("Display name value %s has no length prefix", data.hex())
        return None

    if offset + length + BLOCK_NUMBER_BYTES != len(data):
        logger.warning(
            "Display name value %s does not match its length prefix %d",
            data.hex(),
            length,
        )
        return None

    try:
        handle = data[offset : offset + length].decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Display name value %s is not valid UTF-8", data.hex())
        return None
    return handle or None


def ss58_decode(address: str) -> bytes:
    """Decode an SS58 address into the raw 32-byte account id.

    Raises:
        DecodeError: If the address is not valid base58, has an unexpected
            length, or its checksum does not match
    """
    try:
        raw = base58.b58decode(address)
    except ValueError as e:
        raise DecodeError(f"Invalid SS58 address {address!r}") from e

    if not raw:
        raise DecodeError("SS58 address is empty")

    # Network prefixes 0-63 take one byte, 64-16383 take two.
    prefix_length = 1 if raw[0] < 64 else 2
    if len(raw) != prefix_length + ACCOUNT_ID_BYTES + SS58_CHECKSUM_BYTES:
        raise DecodeError(f"SS58 address {address!r} has an unexpected length")

    body = raw[:-SS58_CHECKSUM_BYTES]
    checksum = hashlib.blake2b(SS58_PREFIX + body, digest_size=64).digest()
    if checksum[:SS58_CHECKSUM_BYTES] != raw[-SS58_CHECKSUM_BYTES:]:
        raise DecodeError(f"SS58 address {address!r} has an invalid checksum")

    return body[prefix_length:]


def decode_account_id(value: Any) -> bytes:
    """Normalize an account id from an RPC result into raw bytes.

    Nodes serialize account ids as SS58 strings; hex strings and arrays of
    byte values are also accepted.
    """
    if isinstance(value, str):
        if value.startswith("0x"):
            return hex_to_bytes(value)
        return ss58_decode(value)
    return decode_byte_array(value)


def decode_byte_array(value: Any) -> bytes:
    """Normalize a byte vector from an RPC result (hex string or list of ints)."""
    if isinstance(value, str):
        return hex_to_bytes(value)
    if isinstance(value, list):
        try:
            return bytes(value)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Invalid byte array {value!r}") from e
    raise DecodeError(f"Expected bytes, got {type(value).__name__}")
