import pytest
from nacl.signing import SigningKey

from didtools.config import Settings
from didtools.multibase import KeyType


@pytest.fixture
def ed25519_public_key_hex() -> str:
    """A freshly generated raw Ed25519 public key, hex-encoded."""
    return bytes(SigningKey.generate().verify_key).hex()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        host="127.0.0.1",
        port=8002,
        log_level="info",
        reload=False,
        default_key_type=KeyType.ED25519,
    )
