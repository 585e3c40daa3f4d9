"""Parsing of the binary authenticator data record.

Layout (all integers big-endian)::

    rpIdHash (32) | flags (1) | signCount (4) | [attested credential data] | [extensions]

    attested credential data:
    aaguid (16) | credentialIdLength (2) | credentialId (L) | credentialPublicKey (CBOR)

For how this is structured, refer to https://www.w3.org/TR/webauthn/#sctn-authenticator-data
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from fido2.webauthn import AuthenticatorData as _Fido2AuthenticatorData

from .config import DEFAULT_OPTIONS, CredentialPresence, DecoderOptions
from .constants import AAGUID_LENGTH, RP_ID_HASH_LENGTH
from .cose import CredentialPublicKey
from .document import Document, decode_document, decode_document_prefix
from .errors import MalformedInput
from .reader import ByteReader

__all__ = [
    "AttestedCredentialData",
    "AuthenticatorData",
    "FLAG",
    "parse_authenticator_data",
]

LOGGER = logging.getLogger("webauthn_decoder.authdata")

FLAG = _Fido2AuthenticatorData.FLAG

# Attested credential data needs more than an AAGUID's worth of bytes.
_ATTESTED_DATA_THRESHOLD = AAGUID_LENGTH


@dataclass(frozen=True)
class AttestedCredentialData:
    aaguid: bytes
    credential_id: bytes
    credential_public_key: CredentialPublicKey

    @property
    def aaguid_uuid(self) -> uuid.UUID:
        return uuid.UUID(bytes=self.aaguid)


@dataclass(frozen=True)
class AuthenticatorData:
    """Authenticator data split into its fields.

    ``extensions`` is ``None`` unless extension data was decoded, which only
    happens under :attr:`CredentialPresence.FLAG`.
    """

    rp_id_hash: bytes
    flags: int
    sign_count: int
    attested_credential_data: Optional[AttestedCredentialData] = None
    extensions: Optional[Document] = None

    def _flag(self, flag: int) -> bool:
        return bool(self.flags & flag)

    @property
    def user_present(self) -> bool:
        return self._flag(FLAG.UP)

    @property
    def user_verified(self) -> bool:
        return self._flag(FLAG.UV)

    @property
    def backup_eligible(self) -> bool:
        return self._flag(FLAG.BE)

    @property
    def backed_up(self) -> bool:
        return self._flag(FLAG.BS)

    @property
    def attested_credential_data_included(self) -> bool:
        return self._flag(FLAG.AT)

    @property
    def extension_data_included(self) -> bool:
        return self._flag(FLAG.ED)


def _read_credential_header(reader: ByteReader) -> Tuple[bytes, bytes]:
    aaguid = reader.read(AAGUID_LENGTH, "aaguid")
    credential_id_length = reader.read_u16("credentialIdLength")
    credential_id = reader.read(credential_id_length, "credentialId")
    return aaguid, credential_id


def _parse_by_length(
    reader: ByteReader, options: DecoderOptions
) -> Optional[AttestedCredentialData]:
    if reader.remaining <= _ATTESTED_DATA_THRESHOLD:
        return None

    aaguid, credential_id = _read_credential_header(reader)
    # The public key must account for every remaining byte.
    key_document = decode_document(reader.remainder())
    public_key = CredentialPublicKey.from_document(
        key_document, strict=options.strict_key_fields
    )
    return AttestedCredentialData(aaguid, credential_id, public_key)


def _parse_by_flags(
    reader: ByteReader, flags: int, options: DecoderOptions
) -> Tuple[Optional[AttestedCredentialData], Optional[Document]]:
    attested_credential_data = None
    extensions = None

    if flags & FLAG.AT:
        aaguid, credential_id = _read_credential_header(reader)
        key_document, used = decode_document_prefix(reader.peek())
        reader.skip(used, "credentialPublicKey")
        public_key = CredentialPublicKey.from_document(
            key_document, strict=options.strict_key_fields
        )
        attested_credential_data = AttestedCredentialData(aaguid, credential_id, public_key)

    if flags & FLAG.ED:
        extensions, used = decode_document_prefix(reader.peek())
        reader.skip(used, "extensions")

    if reader.remaining:
        raise MalformedInput(
            f"Authenticator data has {reader.remaining} unexpected trailing bytes"
        )
    return attested_credential_data, extensions


def parse_authenticator_data(
    data: Union[bytes, bytearray, memoryview],
    options: Optional[DecoderOptions] = None,
) -> Tuple[AuthenticatorData, bytes]:
    """Turn ``attestationObject.authData`` into structured data.

    :param data: The authenticator data exactly as transmitted.
    :param options: Decoder policy, defaults to :data:`DEFAULT_OPTIONS`.
    :return: The parsed authenticator data and the complete input buffer,
        unmodified, for use in signature verification.
    """

    options = options or DEFAULT_OPTIONS
    reader = ByteReader(data)

    rp_id_hash = reader.read(RP_ID_HASH_LENGTH, "rpIdHash")
    flags = reader.read_u8("flags")
    sign_count = reader.read_u32("signCount")

    if options.credential_presence is CredentialPresence.FLAG:
        attested_credential_data, extensions = _parse_by_flags(reader, flags, options)
    else:
        attested_credential_data = _parse_by_length(reader, options)
        extensions = None

    LOGGER.debug(
        "Parsed %d bytes of authenticator data (flags=0x%02x, signCount=%d, attested=%s)",
        len(reader.source),
        flags,
        sign_count,
        attested_credential_data is not None,
    )

    authenticator_data = AuthenticatorData(
        rp_id_hash=rp_id_hash,
        flags=flags,
        sign_count=sign_count,
        attested_credential_data=attested_credential_data,
        extensions=extensions,
    )
    return authenticator_data, reader.source
