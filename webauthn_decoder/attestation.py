"""Decoding of the attestation object returned by a registration ceremony."""
from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from cryptography import x509

from .authdata import AuthenticatorData, parse_authenticator_data
from .config import DecoderOptions
from .document import Document, Map, decode_document
from .errors import EncodingError, MalformedInput, UnsupportedFormat

__all__ = [
    "AttestationObject",
    "AttestationStatement",
    "decode_attestation_object",
]

LOGGER = logging.getLogger("webauthn_decoder.attestation")


def _b64decode(value: str) -> bytes:
    """Decode standard or URL-safe base64, with or without padding."""

    cleaned = value.strip()
    padded = cleaned + "=" * (-len(cleaned) % 4)
    has_url_chars = any(char in "-_" for char in cleaned)
    has_standard_chars = any(char in "+/" for char in cleaned)
    try:
        if has_url_chars and has_standard_chars:
            raise ValueError("mixes standard and URL-safe alphabets")
        if has_url_chars:
            return base64.b64decode(padded, altchars=b"-_", validate=True)
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        LOGGER.debug("Rejected base64 input of %d characters: %s", len(value), exc)
        raise EncodingError(f"Invalid base64 data: {exc}") from exc


@dataclass(frozen=True)
class AttestationStatement:
    """The format specific attestation statement, passed through unverified.

    :param alg: The COSE algorithm used for ``sig``.
    :param sig: The raw attestation signature.
    :param x5c: The certificate chain, if the statement carries one.
    :param ecdaa_key_id: The ECDAA key identifier, if present.
    :param document: The statement map exactly as decoded.
    """

    alg: int
    sig: bytes
    x5c: Optional[Document] = None
    ecdaa_key_id: Optional[Document] = None
    document: Map = field(default_factory=Map, repr=False)

    @classmethod
    def from_document(cls, document: Document) -> "AttestationStatement":
        statement = document.as_map()
        if statement is None:
            raise UnsupportedFormat(f"attStmt must be a map, got {document.kind}")

        alg = statement.get_text("alg")
        if alg is None or alg.as_int() is None:
            raise UnsupportedFormat("attStmt requires an integer alg")
        sig = statement.get_text("sig")
        if sig is None or sig.as_bytes() is None:
            raise UnsupportedFormat("attStmt requires a byte string sig")

        return cls(
            alg=alg.as_int(),
            sig=sig.as_bytes(),
            x5c=statement.get_text("x5c"),
            ecdaa_key_id=statement.get_text("ecdaaKeyId"),
            document=statement,
        )

    def certificates(self) -> List[bytes]:
        """Return the DER encoded ``x5c`` certificates, leaf first."""
        if self.x5c is None:
            return []
        chain = self.x5c.as_array()
        if chain is None:
            raise MalformedInput(f"x5c must be an array, got {self.x5c.kind}")
        certificates = []
        for entry in chain:
            der = entry.as_bytes()
            if der is None:
                raise MalformedInput(f"x5c entries must be byte strings, got {entry.kind}")
            certificates.append(der)
        return certificates

    def load_certificates(self) -> List[x509.Certificate]:
        """Parse the ``x5c`` certificates. The chain is not validated."""
        try:
            return [x509.load_der_x509_certificate(der) for der in self.certificates()]
        except ValueError as exc:
            raise MalformedInput(f"Invalid x5c certificate: {exc}") from exc


@dataclass(frozen=True)
class AttestationObject:
    """A decoded attestation object.

    :param fmt: The attestation statement format identifier.
    :param att_stmt: The attestation statement.
    :param auth_data: The parsed authenticator data.
    :param raw_auth_data: The authenticator data bytes exactly as received.
    """

    fmt: str
    att_stmt: AttestationStatement
    auth_data: AuthenticatorData
    raw_auth_data: bytes = field(repr=False)

    @classmethod
    def from_bytes(
        cls,
        data: Union[bytes, bytearray, memoryview],
        options: Optional[DecoderOptions] = None,
    ) -> "AttestationObject":
        """Decode a CBOR encoded attestation object."""

        envelope = decode_document(data).as_map()
        if envelope is None:
            raise UnsupportedFormat("Attestation object must be a CBOR map")

        auth_data_value = envelope.get_text("authData")
        raw_value = None if auth_data_value is None else auth_data_value.as_bytes()
        if raw_value is None:
            raise UnsupportedFormat("Cannot proceed without auth data")

        fmt_value = envelope.get_text("fmt")
        fmt = None if fmt_value is None else fmt_value.as_text()
        if fmt is None:
            raise UnsupportedFormat("Attestation object requires a text fmt")

        att_stmt_value = envelope.get_text("attStmt")
        if att_stmt_value is None:
            raise UnsupportedFormat("Attestation object requires an attStmt")
        att_stmt = AttestationStatement.from_document(att_stmt_value)

        auth_data, raw_auth_data = parse_authenticator_data(raw_value, options)
        LOGGER.debug("Decoded %r attestation object", fmt)
        return cls(fmt, att_stmt, auth_data, raw_auth_data)

    @classmethod
    def from_base64(
        cls, value: str, options: Optional[DecoderOptions] = None
    ) -> "AttestationObject":
        """Decode a base64 or base64url encoded attestation object."""
        return cls.from_bytes(_b64decode(value), options)


def decode_attestation_object(
    value: Union[str, bytes, bytearray, memoryview],
    options: Optional[DecoderOptions] = None,
) -> AttestationObject:
    """Decode an attestation object given as base64 text or raw bytes."""

    if isinstance(value, str):
        return AttestationObject.from_base64(value, options)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return AttestationObject.from_bytes(value, options)
    raise TypeError(f"Expected str or bytes, got {type(value).__name__}")
