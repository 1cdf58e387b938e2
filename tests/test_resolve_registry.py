"""
Unit tests for did:dsnp registration in org.dsnp.frequency.resolve.registry

Tests cover DID parsing, plugin ordering, and resolution metadata errors.
"""

from unittest.mock import AsyncMock

import pytest

from org.dsnp.frequency.chain.storage import MAX_MSA_ID
from org.dsnp.frequency.errors import ChainConnectionError
from org.dsnp.frequency.resolve.document import DIDDocument
from org.dsnp.frequency.resolve.registry import (
    DIDResolutionResult,
    DSNPDIDResolver,
    get_resolver,
    parse_dsnp_did,
)


def create_plugin(document=None) -> AsyncMock:
    plugin = AsyncMock()
    plugin.resolve.return_value = document
    return plugin


class TestParseDsnpDid:
    """Test suite for parse_dsnp_did."""

    @pytest.mark.parametrize(
        "did,user_id",
        [
            ("did:dsnp:13972", 13972),
            ("did:dsnp:0", 0),
            (f"did:dsnp:{MAX_MSA_ID}", MAX_MSA_ID),
            ("  did:dsnp:42  ", 42),
        ],
    )
    def test_valid(self, did, user_id):
        assert parse_dsnp_did(did) == user_id

    @pytest.mark.parametrize(
        "did",
        [
            "did:dsnp:",
            "did:dsnp:abc",
            "did:dsnp:-1",
            "did:dsnp:013",
            "did:dsnp:1.5",
            f"did:dsnp:{MAX_MSA_ID + 1}",
            "did:web:example.com",
            "13972",
        ],
    )
    def test_invalid(self, did):
        assert parse_dsnp_did(did) is None


class TestDSNPDIDResolver:
    """Test suite for DSNPDIDResolver."""

    @pytest.mark.asyncio
    async def test_found(self):
        document = DIDDocument(id="did:dsnp:1")
        plugin = create_plugin(document)
        resolver = DSNPDIDResolver([plugin])

        result = await resolver.resolve("did:dsnp:1")

        assert result.error is None
        assert result.did_document == document.to_json()
        assert result.did_resolution_metadata == {
            "contentType": "application/did+ld+json"
        }
        plugin.resolve.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_first_document_wins(self):
        """Test plugins are asked in order until one finds the user."""
        first = create_plugin(None)
        second = create_plugin(DIDDocument(id="did:dsnp:2"))
        third = create_plugin(DIDDocument(id="did:dsnp:2", also_known_as=["x"]))
        resolver = DSNPDIDResolver([first, second, third])

        result = await resolver.resolve("did:dsnp:2")

        assert result.did_document is not None
        assert result.did_document["alsoKnownAs"] == []
        first.resolve.assert_awaited_once_with(2)
        third.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_found(self):
        resolver = DSNPDIDResolver([create_plugin(None)])
        result = await resolver.resolve("did:dsnp:0")
        assert result.error == "notFound"
        assert result.did_document is None

    @pytest.mark.asyncio
    async def test_no_plugins(self):
        result = await DSNPDIDResolver([]).resolve("did:dsnp:1")
        assert result.error == "notFound"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("did", ["did:dsnp:abc", "not-a-did", "did:dsnp:"])
    async def test_invalid_did(self, did):
        plugin = create_plugin(None)
        result = await DSNPDIDResolver([plugin]).resolve(did)
        assert result.error == "invalidDid"
        plugin.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_method(self):
        result = await DSNPDIDResolver([create_plugin(None)]).resolve(
            "did:web:example.com"
        )
        assert result.error == "methodNotSupported"

    @pytest.mark.asyncio
    async def test_plugin_errors_propagate(self):
        plugin = create_plugin(None)
        plugin.resolve.side_effect = ChainConnectionError("down")
        with pytest.raises(ChainConnectionError):
            await DSNPDIDResolver([plugin]).resolve("did:dsnp:1")


class TestResolutionResult:
    """Test suite for DIDResolutionResult serialization."""

    def test_to_json(self):
        result = DIDResolutionResult(did_resolution_metadata={"error": "notFound"})
        assert result.to_json() == {
            "didDocument": None,
            "didResolutionMetadata": {"error": "notFound"},
            "didDocumentMetadata": {},
        }


class TestGetResolver:
    """Test suite for get_resolver."""

    @pytest.mark.asyncio
    async def test_method_mapping(self):
        registry = get_resolver([create_plugin(DIDDocument(id="did:dsnp:5"))])
        assert list(registry) == ["dsnp"]

        result = await registry["dsnp"]("did:dsnp:5")
        assert result.did_document is not None
        assert result.did_document["id"] == "did:dsnp:5"
