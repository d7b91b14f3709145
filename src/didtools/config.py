from __future__ import annotations

import os
from dataclasses import dataclass

from didtools.errors import DIDError
from didtools.multibase import KeyType, normalize_key_type


@dataclass
class Settings:
    host: str
    port: int
    log_level: str
    reload: bool
    default_key_type: KeyType


def get_settings() -> Settings:
    port_str = os.getenv("DIDTOOLS_PORT", "8002")
    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"DIDTOOLS_PORT must be a valid integer, got '{port_str}'")

    key_type_str = os.getenv("DIDTOOLS_DEFAULT_KEY_TYPE", KeyType.ED25519.value)
    try:
        default_key_type = normalize_key_type(key_type_str)
    except DIDError:
        raise ValueError(f"DIDTOOLS_DEFAULT_KEY_TYPE is not a supported key type, got '{key_type_str}'")

    return Settings(
        host=os.getenv("DIDTOOLS_HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("DIDTOOLS_LOG_LEVEL", "info"),
        reload=os.getenv("DIDTOOLS_RELOAD", "false").lower() == "true",
        default_key_type=default_key_type,
    )
