"""Multicodec + multibase encoding of raw public keys.

A did:key method-specific identifier is built as:

    "z" + base58btc(varint(multicodec code) + raw public key bytes)

The multicodec codes and the permitted raw key lengths per key type are fixed
by https://github.com/multiformats/multicodec and are exposed read-only.
"""

from __future__ import annotations

import enum
import re
from types import MappingProxyType
from typing import Mapping

import base58 as b58

from didtools.errors import (
    INVALID_FORMAT,
    INVALID_KEY_LENGTH,
    UNSUPPORTED_KEY_TYPE,
    DIDError,
)

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
MULTIBASE_BASE58BTC = "z"

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")


class KeyType(str, enum.Enum):
    ED25519 = "ed25519-pub"
    SECP256K1 = "secp256k1-pub"
    X25519 = "x25519-pub"


MULTICODEC_CODES: Mapping[KeyType, int] = MappingProxyType(
    {
        KeyType.ED25519: 0xED,
        KeyType.SECP256K1: 0xE7,
        KeyType.X25519: 0xEC,
    }
)

# secp256k1 keys may be compressed (33) or uncompressed (65).
KEY_LENGTHS: Mapping[KeyType, tuple[int, ...]] = MappingProxyType(
    {
        KeyType.ED25519: (32,),
        KeyType.SECP256K1: (33, 65),
        KeyType.X25519: (32,),
    }
)

_KEY_TYPE_ALIASES: Mapping[str, KeyType] = MappingProxyType(
    {
        "Ed25519": KeyType.ED25519,
        "secp256k1": KeyType.SECP256K1,
        "X25519": KeyType.X25519,
        **{kt.value: kt for kt in KeyType},
    }
)

_KEY_TYPE_BY_CODE: Mapping[int, KeyType] = MappingProxyType(
    {code: kt for kt, code in MULTICODEC_CODES.items()}
)


def normalize_key_type(key_type: str | KeyType) -> KeyType:
    """Map a canonical tag or a legacy alias (``Ed25519``, ``secp256k1``, ``X25519``) to a KeyType."""
    if isinstance(key_type, KeyType):
        return key_type
    if isinstance(key_type, str) and key_type in _KEY_TYPE_ALIASES:
        return _KEY_TYPE_ALIASES[key_type]
    raise DIDError(f"Unsupported key type: {key_type}", UNSUPPORTED_KEY_TYPE)


def hex_to_bytes(hex_string: str) -> bytes:
    """Decode a hex string, optionally ``0x``-prefixed, into bytes."""
    clean = hex_string[2:] if hex_string.startswith("0x") else hex_string
    if not _HEX_PATTERN.fullmatch(clean):
        raise DIDError("Invalid hexadecimal format", INVALID_FORMAT)
    if len(clean) % 2 != 0:
        raise DIDError("Hexadecimal string must have even length", INVALID_FORMAT)
    return bytes.fromhex(clean)


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as an unsigned LEB128 varint."""
    if value < 0:
        raise DIDError(f"Varint value must be non-negative, got {value}", INVALID_FORMAT)
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: bytes) -> tuple[int, int]:
    """Decode an unsigned LEB128 varint from the start of ``data``.

    Returns:
        Tuple of (value, number of bytes consumed).
    """
    value = 0
    shift = 0
    for index, byte in enumerate(data):
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, index + 1
        shift += 7
    raise DIDError("Truncated varint", INVALID_FORMAT)


def multicodec_prefix(key_type: str | KeyType) -> bytes:
    return encode_varint(MULTICODEC_CODES[normalize_key_type(key_type)])


def encode_base58btc(data: bytes) -> str:
    """Base58 (Bitcoin alphabet) encode. Each leading zero byte becomes one ``1``."""
    return b58.b58encode(data).decode("ascii")


def decode_base58btc(encoded: str) -> bytes:
    try:
        return b58.b58decode(encoded)
    except ValueError as e:
        raise DIDError(f"Invalid base58btc encoding: {e}", INVALID_FORMAT) from e


def encode_multibase(data: bytes) -> str:
    return MULTIBASE_BASE58BTC + encode_base58btc(data)


def decode_multibase(value: str) -> bytes:
    if not value.startswith(MULTIBASE_BASE58BTC):
        raise DIDError(
            f"Unsupported multibase prefix: expected '{MULTIBASE_BASE58BTC}', got '{value[:1]}'",
            INVALID_FORMAT,
        )
    return decode_base58btc(value[len(MULTIBASE_BASE58BTC) :])


def validate_key_length(public_key: bytes, key_type: KeyType) -> None:
    allowed = KEY_LENGTHS[key_type]
    if len(public_key) not in allowed:
        expected = " or ".join(str(n) for n in allowed)
        raise DIDError(
            f"Invalid key length for {key_type.value}: expected {expected} bytes, got {len(public_key)}",
            INVALID_KEY_LENGTH,
        )


def encode_multikey(public_key: bytes, key_type: str | KeyType) -> str:
    """Encode raw public key bytes as a multicodec-prefixed base58btc multibase string."""
    kt = normalize_key_type(key_type)
    validate_key_length(public_key, kt)
    return encode_multibase(multicodec_prefix(kt) + public_key)


def decode_multikey(value: str) -> tuple[KeyType, bytes]:
    """Inverse of :func:`encode_multikey`. Returns (key type, raw public key bytes)."""
    decoded = decode_multibase(value)
    code, consumed = decode_varint(decoded)
    key_type = _KEY_TYPE_BY_CODE.get(code)
    if key_type is None:
        raise DIDError(f"Unsupported multicodec prefix: 0x{code:x}", UNSUPPORTED_KEY_TYPE)
    public_key = decoded[consumed:]
    validate_key_length(public_key, key_type)
    return key_type, public_key
