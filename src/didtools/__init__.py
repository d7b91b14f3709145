"""didtools: create, parse and validate did:key and did:web Decentralized Identifiers.

- did:key creation from a raw public key (multicodec varint + base58btc multibase).
- DID URL parsing, method-specific validation and normalization.
- DID Document assembly.
"""

from didtools.did import (
    DIDKey,
    create_did,
    create_did_key,
    create_did_web,
    decode_did_key,
    public_key_from_did,
)
from didtools.document import (
    DIDDocument,
    ServiceEndpoint,
    VerificationMethod,
    create_did_document,
    create_did_key_document,
    did_key_verification_method,
)
from didtools.errors import DIDError
from didtools.grammar import (
    DIDComponents,
    ParseResult,
    ValidationResult,
    create_did_url,
    extract_identifier,
    extract_method,
    is_did,
    normalize_did,
    parse_did,
    validate_did,
)
from didtools.multibase import KeyType

VERSION = "0.1.0"

__all__ = [
    "DIDComponents",
    "DIDDocument",
    "DIDError",
    "DIDKey",
    "KeyType",
    "ParseResult",
    "ServiceEndpoint",
    "VERSION",
    "ValidationResult",
    "VerificationMethod",
    "create_did",
    "create_did_document",
    "create_did_key",
    "create_did_key_document",
    "create_did_url",
    "create_did_web",
    "decode_did_key",
    "did_key_verification_method",
    "extract_identifier",
    "extract_method",
    "is_did",
    "normalize_did",
    "parse_did",
    "public_key_from_did",
    "validate_did",
]
