"""DID URL parsing, validation and serialization.

Grammar: ``did:<method>:<identifier>[/<path>][?<query>][#<fragment>]``

- method: a lowercase letter followed by lowercase letters or digits.
- identifier: one or more characters other than ``/``, ``?`` and ``#``.
- query: ``&``-separated ``key=value`` (or bare ``key``) pairs, percent-decoded.
  When a key repeats, the last occurrence wins.

Parsing and validation never raise; they report failures in their result.
Only :func:`normalize_did` raises :class:`~didtools.errors.DIDError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional
from urllib.parse import quote, unquote

from didtools.errors import INVALID_DID, DIDError

DID_PATTERN = re.compile(
    r"did:([a-z][a-z0-9]*):([^/?#]+)(?:/([^?#]*))?(?:\?([^#]*))?(?:#(.*))?"
)

SUPPORTED_METHODS = frozenset({"key", "web"})

# Characters never allowed in a did:key identifier (whitespace included).
_KEY_IDENTIFIER_FORBIDDEN = re.compile(r"""[\s!@#$%^&*()+=\[\]{}|\\:";'<>?,./]""")
_KEY_IDENTIFIER_MIN_LENGTH = 10

# Same unreserved set as JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "!*'()"

INVALID_KEY_IDENTIFIER = "Invalid did:key identifier format"
INVALID_WEB_IDENTIFIER = "did:web identifier must be a valid domain name"


@dataclass(frozen=True)
class DIDComponents:
    """The parts of a DID URL. ``query`` is stored read-only."""

    method: str
    identifier: str
    path: Optional[str] = None
    query: Optional[Mapping[str, str]] = None
    fragment: Optional[str] = None

    def __post_init__(self) -> None:
        if self.query is not None and not isinstance(self.query, MappingProxyType):
            object.__setattr__(self, "query", MappingProxyType(dict(self.query)))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"method": self.method, "identifier": self.identifier}
        if self.path is not None:
            data["path"] = self.path
        if self.query is not None:
            data["query"] = dict(self.query)
        if self.fragment is not None:
            data["fragment"] = self.fragment
        return data


@dataclass(frozen=True)
class ParseResult:
    did: Optional[str]
    components: Optional[DIDComponents]
    is_valid: bool
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "did": self.did,
            "components": self.components.to_dict() if self.components else None,
            "is_valid": self.is_valid,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"is_valid": self.is_valid}
        if self.error is not None:
            data["error"] = self.error
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


def _invalid(did: Optional[str], error: str) -> ParseResult:
    return ParseResult(did=did, components=None, is_valid=False, error=error)


def _parse_query(query: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in query.split("&"):
        key, _, value = pair.partition("=")
        if key:
            params[unquote(key)] = unquote(value)
    return params


def parse_did(did: Any) -> ParseResult:
    """Split a DID URL into its components. Never raises."""
    if not isinstance(did, str) or not did:
        return _invalid(did if isinstance(did, str) else None, "DID must be a non-empty string")

    trimmed = did.strip()
    if not trimmed:
        return _invalid(trimmed, "Empty DID string is invalid")

    match = DID_PATTERN.fullmatch(trimmed)
    if match is None:
        return _invalid(trimmed, "Invalid DID format")

    method, identifier, path, query, fragment = match.groups()
    if not method or not identifier:
        return _invalid(trimmed, "DID method and identifier cannot be empty")

    params = _parse_query(query) if query else {}
    components = DIDComponents(
        method=method,
        identifier=identifier,
        path=path or None,
        query=params or None,
        fragment=fragment or None,
    )
    return ParseResult(did=trimmed, components=components, is_valid=True)


def _is_valid_key_identifier(identifier: str) -> bool:
    return (
        bool(identifier)
        and _KEY_IDENTIFIER_FORBIDDEN.search(identifier) is None
        and identifier.startswith("z")
        and len(identifier) >= _KEY_IDENTIFIER_MIN_LENGTH
    )


def validate_did(did: Any) -> ValidationResult:
    """Check a DID against the grammar and the method-specific rules. Never raises.

    Methods other than ``key`` and ``web`` are accepted with a warning.
    """
    result = parse_did(did)
    if not result.is_valid or result.components is None:
        return ValidationResult(is_valid=False, error=result.error)

    components = result.components
    warnings: list[str] = []

    if components.method == "key":
        if not _is_valid_key_identifier(components.identifier):
            return ValidationResult(is_valid=False, error=INVALID_KEY_IDENTIFIER)
    elif components.method == "web":
        if "." not in components.identifier:
            return ValidationResult(is_valid=False, error=INVALID_WEB_IDENTIFIER)

    if components.method not in SUPPORTED_METHODS:
        warnings.append(f"Method '{components.method}' is not officially supported")

    return ValidationResult(is_valid=True, warnings=tuple(warnings))


def is_did(did: Any) -> bool:
    return validate_did(did).is_valid


def create_did_url(components: DIDComponents) -> str:
    """Serialize components back into a DID URL (inverse of :func:`parse_did`)."""
    did = f"did:{components.method}:{components.identifier}"
    if components.path:
        did += f"/{components.path}"
    if components.query:
        pairs = (
            f"{quote(key, safe=_URI_COMPONENT_SAFE)}={quote(value, safe=_URI_COMPONENT_SAFE)}"
            for key, value in components.query.items()
        )
        did += "?" + "&".join(pairs)
    if components.fragment:
        did += f"#{components.fragment}"
    return did


def normalize_did(did: str) -> str:
    """Parse and re-serialize a DID URL.

    Raises:
        DIDError: If the input does not parse.
    """
    result = parse_did(did)
    if not result.is_valid or result.components is None:
        raise DIDError(f"Cannot normalize invalid DID: {result.error}", INVALID_DID)
    return create_did_url(result.components)


def extract_method(did: Any) -> Optional[str]:
    result = parse_did(did)
    return result.components.method if result.components else None


def extract_identifier(did: Any) -> Optional[str]:
    result = parse_did(did)
    return result.components.identifier if result.components else None
