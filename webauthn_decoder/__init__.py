"""Decoder for WebAuthn registration attestation objects."""
from __future__ import annotations

from .attestation import AttestationObject, AttestationStatement, decode_attestation_object
from .authdata import FLAG, AttestedCredentialData, AuthenticatorData, parse_authenticator_data
from .config import DEFAULT_OPTIONS, CredentialPresence, DecoderOptions
from .constants import (
    COSE_ALGORITHM_ES256,
    COSE_ALGORITHM_RS256,
    WEBAUTHN_CHALLENGE_LENGTH,
    WEBAUTHN_CREDENTIAL_ID_LENGTH,
    CoseAlgorithm,
)
from .cose import (
    CompressedCoordinates,
    Coordinates,
    CredentialPublicKey,
    UncompressedCoordinates,
)
from .errors import (
    AttestationDecodeError,
    EncodingError,
    MalformedInput,
    MissingField,
    Truncation,
    UnsupportedFormat,
)

__version__ = "0.1.0"

__all__ = [
    "AttestationDecodeError",
    "AttestationObject",
    "AttestationStatement",
    "AttestedCredentialData",
    "AuthenticatorData",
    "COSE_ALGORITHM_ES256",
    "COSE_ALGORITHM_RS256",
    "CompressedCoordinates",
    "Coordinates",
    "CoseAlgorithm",
    "CredentialPresence",
    "CredentialPublicKey",
    "DEFAULT_OPTIONS",
    "DecoderOptions",
    "EncodingError",
    "FLAG",
    "MalformedInput",
    "MissingField",
    "Truncation",
    "UncompressedCoordinates",
    "UnsupportedFormat",
    "WEBAUTHN_CHALLENGE_LENGTH",
    "WEBAUTHN_CREDENTIAL_ID_LENGTH",
    "decode_attestation_object",
    "parse_authenticator_data",
]
