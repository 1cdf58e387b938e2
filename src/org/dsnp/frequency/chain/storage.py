"""Storage key derivation for Frequency storage maps keyed by MSA id."""

from typing import Final

import xxhash

MSA_ID_BYTES: Final = 8
MAX_MSA_ID: Final = 2 ** (MSA_ID_BYTES * 8) - 1


def twox64(data: bytes) -> bytes:
    """Return the 8-byte xxHash64 digest in the runtime's little-endian byte order."""
    return xxhash.xxh64_intdigest(data, seed=0).to_bytes(8, "little")


def twox128(data: bytes) -> bytes:
    """Return the 16-byte twox128 hash: two xxHash64 rounds with seeds 0 and 1."""
    return b"".join(
        xxhash.xxh64_intdigest(data, seed=seed).to_bytes(8, "little")
        for seed in (0, 1)
    )


def twox64_concat(data: bytes) -> bytes:
    """Hash the key and append the key itself, as the Twox64Concat hasher does."""
    return twox64(data) + data


def storage_prefix(module: str, method: str) -> bytes:
    """Return the prefix identifying a storage map independently of any key.

    Args:
        module: Pallet name, e.g. ``Msa``
        method: Storage item name, e.g. ``PublicKeyCountForMsaId``

    Returns:
        32 bytes: twox128(module) followed by twox128(method)
    """
    return twox128(module.encode("utf-8")) + twox128(method.encode("utf-8"))


def encode_msa_id(msa_id: int) -> bytes:
    """Encode an MSA id as a fixed-width 64-bit SCALE (little-endian) integer.

    Raises:
        ValueError: If the id does not fit in an unsigned 64-bit integer
    """
    if not 0 <= msa_id <= MAX_MSA_ID:
        raise ValueError(f"MSA id {msa_id} is not an unsigned 64-bit integer")
    return msa_id.to_bytes(MSA_ID_BYTES, "little")


def storage_key(prefix: bytes, msa_id: int) -> str:
    """Return the hex storage key for ``msa_id`` in the map identified by ``prefix``."""
    return "0x" + (prefix + twox64_concat(encode_msa_id(msa_id))).hex()


KEY_COUNT_PREFIX: Final = storage_prefix("Msa", "PublicKeyCountForMsaId")
"""Prefix of the map holding the number of control keys per MSA"""

DISPLAY_NAME_PREFIX: Final = storage_prefix("Handles", "MSAIdToDisplayName")
"""Prefix of the map holding the handle claimed by each MSA"""
