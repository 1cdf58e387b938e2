"""DID Document models produced by the resolver."""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

DID_CONTEXT = "https://www.w3.org/ns/did/v1"
MULTIKEY_CONTEXT = "https://w3id.org/security/multikey/v1"
HANDLE_DID_PREFIX = "did:frqcy:handle:"


class VerificationMethod(BaseModel):
    """Multikey verification method controlled by a did:dsnp DID."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    context: Literal["https://w3id.org/security/multikey/v1"] = Field(
        default=MULTIKEY_CONTEXT, alias="@context"
    )
    id: str
    type: Literal["Multikey"] = "Multikey"
    controller: str
    public_key_multibase: str = Field(alias="publicKeyMultibase")

    @staticmethod
    def for_key(controller: str, public_key_multibase: str) -> "VerificationMethod":
        return VerificationMethod(
            id=f"{controller}#{public_key_multibase}",
            controller=controller,
            public_key_multibase=public_key_multibase,
        )


class DIDDocument(BaseModel):
    """DID Document for one MSA.

    Serialize with ``to_json()`` to get the W3C field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    context: List[str] = Field(default_factory=lambda: [DID_CONTEXT], alias="@context")
    id: str
    authentication: List[VerificationMethod] = Field(default_factory=list)
    assertion_method: List[VerificationMethod] = Field(
        default_factory=list, alias="assertionMethod"
    )
    key_agreement: List[VerificationMethod] = Field(
        default_factory=list, alias="keyAgreement"
    )
    also_known_as: List[str] = Field(default_factory=list, alias="alsoKnownAs")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def handle_did(handle: str) -> str:
    return f"{HANDLE_DID_PREFIX}{handle}"
