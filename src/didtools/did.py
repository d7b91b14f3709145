"""did:key and did:web creation, and did:key decoding.

did:key: multicodec varint prefix + raw public key, base58btc encoded with
the multibase ``z`` marker, behind ``did:key:``.

did:web: the domain with ``:`` percent-encoded, followed by the optional path
with ``/`` replaced by ``:``.

Every created DID is passed back through :func:`didtools.grammar.validate_did`
before it is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from didtools.errors import (
    INTERNAL_ERROR,
    INVALID_DOMAIN,
    INVALID_FORMAT,
    MISSING_FIELD,
    UNSUPPORTED_METHOD,
    DIDError,
)
from didtools.grammar import validate_did
from didtools.multibase import (
    KeyType,
    decode_multikey,
    encode_multikey,
    hex_to_bytes,
    normalize_key_type,
)

logger = logging.getLogger(__name__)

DID_KEY_PREFIX = "did:key:"
DID_WEB_PREFIX = "did:web:"
_MAX_DOMAIN_LENGTH = 253


@dataclass(frozen=True)
class DIDKey:
    did: str
    key_type: KeyType
    public_key: bytes

    @property
    def multibase(self) -> str:
        return self.did[len(DID_KEY_PREFIX) :]


def _self_check(did: str, code: str = INTERNAL_ERROR) -> str:
    validation = validate_did(did)
    if not validation.is_valid:
        logger.error("Created DID failed validation: %s (%s)", did, validation.error)
        raise DIDError(f"Generated DID failed validation: {validation.error}", code)
    return did


def create_did_key(public_key_hex: str, key_type: str | KeyType = KeyType.ED25519) -> str:
    """Construct a did:key from a hex-encoded raw public key.

    Args:
        public_key_hex: Raw public key bytes as hex, optionally ``0x``-prefixed.
        key_type: ``ed25519-pub``, ``secp256k1-pub`` or ``x25519-pub``
            (legacy ``Ed25519``, ``secp256k1`` and ``X25519`` are accepted).

    Raises:
        DIDError: On malformed hex, an unsupported key type or a wrong key length.
    """
    if not public_key_hex or not isinstance(public_key_hex, str):
        raise DIDError("Public key is required", MISSING_FIELD)

    normalized = normalize_key_type(key_type)
    public_key = hex_to_bytes(public_key_hex)
    did = DID_KEY_PREFIX + encode_multikey(public_key, normalized)
    logger.debug("Created %s did:key %s", normalized.value, did)
    return _self_check(did)


def decode_did_key(did: str) -> DIDKey:
    """Recover the key type and raw public key bytes from a did:key."""
    if not isinstance(did, str) or not did.startswith(DID_KEY_PREFIX):
        raise DIDError(f"DID must start with '{DID_KEY_PREFIX}', got '{str(did)[:20]}'", INVALID_FORMAT)
    multibase = did[len(DID_KEY_PREFIX) :]
    key_type, public_key = decode_multikey(multibase)
    return DIDKey(did=did, key_type=key_type, public_key=public_key)


def public_key_from_did(did: str) -> bytes:
    """Extract the raw public key bytes from a did:key string."""
    return decode_did_key(did).public_key


def _validate_domain(domain: str) -> None:
    if not domain or not isinstance(domain, str):
        raise DIDError("Domain is required", MISSING_FIELD)
    if "://" in domain or " " in domain:
        raise DIDError("Invalid domain format", INVALID_DOMAIN)
    # Rejects localhost and other bare host names.
    if "." not in domain:
        raise DIDError("Domain must be a valid FQDN", INVALID_DOMAIN)
    if len(domain) > _MAX_DOMAIN_LENGTH:
        raise DIDError("Domain too long", INVALID_DOMAIN)


def create_did_web(domain: str, path: Optional[str] = None) -> str:
    """Construct a did:web from a domain and an optional ``/``-separated path.

    Raises:
        DIDError: If the domain is missing, malformed, has no dot or exceeds 253 characters.
    """
    _validate_domain(domain)

    identifier = domain.replace(":", "%3A")
    if path is not None:
        if not isinstance(path, str):
            raise DIDError("Path must be a string", INVALID_FORMAT)
        segments = path.strip("/")
        if segments:
            identifier += ":" + segments.replace("/", ":")

    did = DID_WEB_PREFIX + identifier
    logger.debug("Created did:web %s", did)
    return _self_check(did, INVALID_DOMAIN)


def create_did(
    method: str,
    *,
    public_key: Optional[str] = None,
    key_type: str | KeyType = KeyType.ED25519,
    domain: Optional[str] = None,
    path: Optional[str] = None,
) -> str:
    """Create a DID with the given method (``key`` or ``web``)."""
    if method == "key":
        if not public_key:
            raise DIDError("publicKey is required for did:key", MISSING_FIELD)
        return create_did_key(public_key, key_type)
    if method == "web":
        if not domain:
            raise DIDError("domain is required for did:web", MISSING_FIELD)
        return create_did_web(domain, path)
    raise DIDError(f"Unsupported DID method: {method}", UNSUPPORTED_METHOD)
