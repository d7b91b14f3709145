from __future__ import annotations

import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator

from didtools.config import Settings
from didtools.deps import get_settings
from didtools.did import create_did, decode_did_key
from didtools.document import (
    ServiceEndpoint,
    VerificationMethod,
    create_did_document,
    create_did_key_document,
)
from didtools.grammar import normalize_did, parse_did, validate_did

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/dids", tags=["dids"])


class CreateDIDRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    method: str = Field(..., min_length=1, max_length=32)
    public_key: Optional[str] = None
    key_type: Optional[str] = Field(default=None, max_length=32)
    domain: Optional[str] = None
    path: Optional[str] = None

    @field_validator("method")
    @classmethod
    def _validate_method(cls, v: str) -> str:
        return v.strip()

    @field_validator("public_key", "domain")
    @classmethod
    def _strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class CreateDIDResponse(BaseModel):
    did: str
    method: str


class ComponentsOut(BaseModel):
    method: str
    identifier: str
    path: Optional[str] = None
    query: Optional[dict[str, str]] = None
    fragment: Optional[str] = None


class ParseResponse(BaseModel):
    did: Optional[str]
    components: Optional[ComponentsOut]
    is_valid: bool
    error: Optional[str] = None


class ValidateResponse(BaseModel):
    is_valid: bool
    error: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class NormalizeResponse(BaseModel):
    did: str


class KeyInfoResponse(BaseModel):
    did: str
    key_type: str
    public_key: str
    public_key_multibase: str
    document: dict[str, Any]


class DocumentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    did: str = Field(..., min_length=1)
    context: Optional[Union[str, list[str]]] = Field(default=None, alias="@context")
    controller: Optional[Union[str, list[str]]] = None
    verification_method: Optional[list[VerificationMethod]] = None
    authentication: Optional[list[Union[str, VerificationMethod]]] = None
    assertion_method: Optional[list[Union[str, VerificationMethod]]] = None
    key_agreement: Optional[list[Union[str, VerificationMethod]]] = None
    capability_invocation: Optional[list[Union[str, VerificationMethod]]] = None
    capability_delegation: Optional[list[Union[str, VerificationMethod]]] = None
    service: Optional[list[ServiceEndpoint]] = None
    also_known_as: Optional[list[str]] = None
    media_type: Optional[str] = None


@router.post("", response_model=CreateDIDResponse)
async def create(
    payload: CreateDIDRequest, settings: Settings = Depends(get_settings)
) -> CreateDIDResponse:
    """Create a did:key from a hex public key, or a did:web from a domain."""
    did = create_did(
        payload.method,
        public_key=payload.public_key,
        key_type=payload.key_type or settings.default_key_type,
        domain=payload.domain,
        path=payload.path,
    )
    logger.info("Created %s", did)
    return CreateDIDResponse(did=did, method=payload.method)


@router.get("/parse", response_model=ParseResponse, response_model_exclude_none=True)
async def parse(did: str = Query(...)) -> dict:
    return parse_did(did).to_dict()


@router.get("/validate", response_model=ValidateResponse)
async def validate(did: str = Query(...)) -> dict:
    return validate_did(did).to_dict()


@router.get("/normalize", response_model=NormalizeResponse)
async def normalize(did: str = Query(...)) -> NormalizeResponse:
    return NormalizeResponse(did=normalize_did(did))


@router.get("/key", response_model=KeyInfoResponse)
async def key_info(did: str = Query(...)) -> KeyInfoResponse:
    """Decode a did:key and expand it into its document, locally."""
    key = decode_did_key(did.strip())
    return KeyInfoResponse(
        did=key.did,
        key_type=key.key_type.value,
        public_key=key.public_key.hex(),
        public_key_multibase=key.multibase,
        document=create_did_key_document(key.did).to_dict(),
    )


@router.post("/document")
async def document(payload: DocumentRequest) -> dict:
    doc = create_did_document(
        payload.did,
        context=payload.context,
        controller=payload.controller,
        verification_method=payload.verification_method,
        authentication=payload.authentication,
        assertion_method=payload.assertion_method,
        key_agreement=payload.key_agreement,
        capability_invocation=payload.capability_invocation,
        capability_delegation=payload.capability_delegation,
        service=payload.service,
        also_known_as=payload.also_known_as,
        media_type=payload.media_type,
    )
    return doc.to_dict()
