"""Failure taxonomy shared by every stage of attestation decoding."""
from __future__ import annotations

from typing import Optional

__all__ = [
    "AttestationDecodeError",
    "EncodingError",
    "MalformedInput",
    "MissingField",
    "Truncation",
    "UnsupportedFormat",
]


class AttestationDecodeError(Exception):
    """Base exception for attestation decoding errors."""


class EncodingError(AttestationDecodeError):
    """Input is not valid base64 or not well-formed CBOR."""


class Truncation(AttestationDecodeError):
    """Fewer bytes remain than a fixed-length field requires."""

    def __init__(self, field: str, expected: int, available: int):
        super().__init__(
            f"Truncated {field}: expected {expected} bytes, {available} available"
        )
        self.field = field
        self.expected = expected
        self.available = available


class MissingField(AttestationDecodeError):
    """A required key is absent from the public key document."""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} missing")
        self.field = field


class UnsupportedFormat(AttestationDecodeError):
    """The payload does not have the shape of an attestation object."""


class MalformedInput(AttestationDecodeError):
    """A field is present but its content cannot be used."""
