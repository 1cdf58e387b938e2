"""did:dsnp method registration.

DSNP resolvers are chain-specific plugins that turn a user id into a DID
Document. DSNPDIDResolver parses did:dsnp DIDs, asks each plugin in turn, and
packages the answer as a DID resolution result.
"""

import re
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from org.dsnp.frequency.chain.storage import MAX_MSA_ID
from org.dsnp.frequency.resolve.document import DIDDocument

DSNP_DID_PATTERN = re.compile(r"^did:dsnp:(0|[1-9][0-9]*)$")
DID_PATTERN = re.compile(r"^did:([a-z0-9]+):(.+)$")
DID_LD_JSON = "application/did+ld+json"


class DSNPResolver(Protocol):
    async def resolve(self, user_id: int) -> Optional[DIDDocument]: ...


class DIDResolutionResult(BaseModel):
    """DID resolution result: the document plus resolution metadata."""

    model_config = ConfigDict(populate_by_name=True)

    did_document: Optional[Dict[str, Any]] = Field(default=None, alias="didDocument")
    did_resolution_metadata: Dict[str, Any] = Field(
        default_factory=dict, alias="didResolutionMetadata"
    )
    did_document_metadata: Dict[str, Any] = Field(
        default_factory=dict, alias="didDocumentMetadata"
    )

    @property
    def error(self) -> Optional[str]:
        return self.did_resolution_metadata.get("error")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def parse_dsnp_did(did: str) -> Optional[int]:
    """Return the user id of a did:dsnp DID, or None if it is not one."""
    match = DSNP_DID_PATTERN.match(did.strip())
    if match is None:
        return None
    user_id = int(match.group(1))
    if user_id > MAX_MSA_ID:
        return None
    return user_id


def error_result(error: str) -> DIDResolutionResult:
    return DIDResolutionResult(did_resolution_metadata={"error": error})


class DSNPDIDResolver:
    """Resolves did:dsnp DIDs using an ordered list of DSNP resolver plugins."""

    method = "dsnp"

    def __init__(self, resolvers: Sequence[DSNPResolver]):
        self.resolvers = list(resolvers)

    async def resolve(self, did: str) -> DIDResolutionResult:
        """Resolve a DID; the first plugin that finds a document wins.

        Resolver exceptions propagate to the caller.
        """
        did = did.strip()
        method_match = DID_PATTERN.match(did)
        if method_match is None:
            return error_result("invalidDid")
        if method_match.group(1) != self.method:
            return error_result("methodNotSupported")

        user_id = parse_dsnp_did(did)
        if user_id is None:
            return error_result("invalidDid")

        for resolver in self.resolvers:
            document = await resolver.resolve(user_id)
            if document is not None:
                return DIDResolutionResult(
                    did_document=document.to_json(),
                    did_resolution_metadata={"contentType": DID_LD_JSON},
                )
        return error_result("notFound")


def get_resolver(
    resolvers: Sequence[DSNPResolver],
) -> Dict[str, Callable[[str], Awaitable[DIDResolutionResult]]]:
    """Return a method-name to resolve-function mapping for DID resolver registries."""
    return {DSNPDIDResolver.method: DSNPDIDResolver(resolvers).resolve}
