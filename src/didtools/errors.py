"""Domain exception for didtools.

Every creation, encoding and normalization failure surfaces as a DIDError.
The REST layer registers one exception handler that converts it to an HTTP
response; the CLI prints the message and exits non-zero.
"""

from __future__ import annotations

INVALID_FORMAT = "INVALID_FORMAT"
INVALID_KEY_LENGTH = "INVALID_KEY_LENGTH"
UNSUPPORTED_KEY_TYPE = "UNSUPPORTED_KEY_TYPE"
INVALID_DOMAIN = "INVALID_DOMAIN"
INVALID_DID = "INVALID_DID"
UNSUPPORTED_METHOD = "UNSUPPORTED_METHOD"
MISSING_FIELD = "MISSING_FIELD"
INTERNAL_ERROR = "INTERNAL_ERROR"

_STATUS_BY_CODE = {
    UNSUPPORTED_METHOD: 400,
    INTERNAL_ERROR: 500,
}


class DIDError(Exception):
    """A DID operation failed. Carries a message, an optional code and a status code."""

    status_code: int = 422

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code
        self.status_code = _STATUS_BY_CODE.get(code or "", DIDError.status_code)
        super().__init__(message)

    @property
    def detail(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"DIDError({self.message!r}, code={self.code!r})"
