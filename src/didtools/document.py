"""DID Document assembly (W3C DID Core data model).

Documents are pydantic models whose aliases carry the JSON-LD member names
(``@context``, ``verificationMethod``, ...). ``DIDDocument.to_dict()`` gives
the JSON-shaped tree with unset members omitted.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from didtools.did import decode_did_key
from didtools.errors import INVALID_DID, INVALID_FORMAT, DIDError
from didtools.grammar import validate_did
from didtools.multibase import KeyType

DID_CONTEXT_V1 = "https://www.w3.org/ns/did/v1"
ED25519_2020_CONTEXT = "https://w3id.org/security/suites/ed25519-2020/v1"
MULTIKEY_CONTEXT = "https://w3id.org/security/multikey/v1"

DEFAULT_CONTEXT = (DID_CONTEXT_V1, ED25519_2020_CONTEXT)

MEDIA_TYPE_JSON = "application/did+json"
MEDIA_TYPE_JSON_LD = "application/did+ld+json"
_MEDIA_TYPES = frozenset({MEDIA_TYPE_JSON, MEDIA_TYPE_JSON_LD})


class VerificationMethod(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str
    type: str
    controller: str
    public_key_multibase: Optional[str] = Field(default=None, alias="publicKeyMultibase")
    public_key_jwk: Optional[dict[str, Any]] = Field(default=None, alias="publicKeyJwk")


class ServiceEndpoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str
    type: str
    service_endpoint: Union[str, list[str], dict[str, Any]] = Field(alias="serviceEndpoint")


Relationship = Union[str, VerificationMethod]


class DIDDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    context: Optional[Union[str, list[str]]] = Field(default=None, alias="@context")
    id: str
    controller: Optional[Union[str, list[str]]] = None
    also_known_as: Optional[list[str]] = Field(default=None, alias="alsoKnownAs")
    verification_method: Optional[list[VerificationMethod]] = Field(
        default=None, alias="verificationMethod"
    )
    authentication: Optional[list[Relationship]] = None
    assertion_method: Optional[list[Relationship]] = Field(default=None, alias="assertionMethod")
    key_agreement: Optional[list[Relationship]] = Field(default=None, alias="keyAgreement")
    capability_invocation: Optional[list[Relationship]] = Field(
        default=None, alias="capabilityInvocation"
    )
    capability_delegation: Optional[list[Relationship]] = Field(
        default=None, alias="capabilityDelegation"
    )
    service: Optional[list[ServiceEndpoint]] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def _qualify_service(did: str, service: ServiceEndpoint | dict[str, Any]) -> ServiceEndpoint:
    svc = service if isinstance(service, ServiceEndpoint) else ServiceEndpoint.model_validate(service)
    # Fragment-only ids ("#agent") are made absolute; absolute ids pass through.
    if svc.id.startswith("#"):
        return svc.model_copy(update={"id": f"{did}{svc.id}"})
    return svc


def create_did_document(
    did: str,
    *,
    context: Optional[Union[str, Sequence[str]]] = None,
    controller: Optional[Union[str, Sequence[str]]] = None,
    verification_method: Optional[
        Union[VerificationMethod, dict[str, Any], Sequence[Union[VerificationMethod, dict[str, Any]]]]
    ] = None,
    authentication: Optional[Sequence[Union[str, VerificationMethod, dict[str, Any]]]] = None,
    assertion_method: Optional[Sequence[Union[str, VerificationMethod, dict[str, Any]]]] = None,
    key_agreement: Optional[Sequence[Union[str, VerificationMethod, dict[str, Any]]]] = None,
    capability_invocation: Optional[Sequence[Union[str, VerificationMethod, dict[str, Any]]]] = None,
    capability_delegation: Optional[Sequence[Union[str, VerificationMethod, dict[str, Any]]]] = None,
    service: Optional[Sequence[Union[ServiceEndpoint, dict[str, Any]]]] = None,
    also_known_as: Optional[Sequence[str]] = None,
    media_type: Optional[str] = None,
) -> DIDDocument:
    """Assemble a DID Document for a valid DID.

    ``controller`` defaults to the DID itself. ``@context`` defaults to the DID
    v1 and Ed25519-2020 contexts unless ``media_type`` is plain
    ``application/did+json``, in which case it is left out.

    Raises:
        DIDError: If the DID is invalid or the media type is unknown.
    """
    validation = validate_did(did)
    if not validation.is_valid:
        raise DIDError(f"Invalid DID: {validation.error}", INVALID_DID)
    if media_type is not None and media_type not in _MEDIA_TYPES:
        raise DIDError(f"Unsupported media type: {media_type}", INVALID_FORMAT)

    fields: dict[str, Any] = {"id": did, "controller": _as_str_or_list(controller) or did}

    if context is not None:
        fields["context"] = _as_str_or_list(context)
    elif media_type != MEDIA_TYPE_JSON:
        fields["context"] = list(DEFAULT_CONTEXT)

    if verification_method is not None:
        if isinstance(verification_method, (VerificationMethod, dict)):
            fields["verification_method"] = [verification_method]
        else:
            fields["verification_method"] = list(verification_method)

    for name, value in (
        ("authentication", authentication),
        ("assertion_method", assertion_method),
        ("key_agreement", key_agreement),
        ("capability_invocation", capability_invocation),
        ("capability_delegation", capability_delegation),
    ):
        if value is not None:
            fields[name] = list(value)

    if also_known_as is not None:
        fields["also_known_as"] = list(also_known_as)

    try:
        if service:
            fields["service"] = [_qualify_service(did, svc) for svc in service]
        return DIDDocument.model_validate(fields)
    except ValidationError as e:
        raise DIDError(f"Invalid DID document: {e}", INVALID_FORMAT) from e


def _as_str_or_list(value: Optional[Union[str, Sequence[str]]]) -> Optional[Union[str, list[str]]]:
    if value is None or isinstance(value, str):
        return value
    return list(value)


def did_key_verification_method(did: str) -> VerificationMethod:
    """The Multikey verification method embedded in a did:key."""
    key = decode_did_key(did)
    return VerificationMethod(
        id=f"{did}#{key.multibase}",
        type="Multikey",
        controller=did,
        public_key_multibase=key.multibase,
    )


def create_did_key_document(did: str) -> DIDDocument:
    """Expand a did:key into its document without any network access.

    X25519 keys can only agree keys; signing keys get the authentication,
    assertion and capability relationships.
    """
    key = decode_did_key(did)
    method = did_key_verification_method(did)
    relationships: dict[str, Any]
    if key.key_type is KeyType.X25519:
        relationships = {"key_agreement": [method.id]}
    else:
        relationships = {
            "authentication": [method.id],
            "assertion_method": [method.id],
            "capability_invocation": [method.id],
            "capability_delegation": [method.id],
        }
    return create_did_document(
        did,
        context=[DID_CONTEXT_V1, MULTIKEY_CONTEXT],
        verification_method=method,
        **relationships,
    )
