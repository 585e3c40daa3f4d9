"""Decoder policy options and their environment configuration."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum, unique
from typing import Mapping, Optional

__all__ = [
    "CREDENTIAL_PRESENCE_ENV",
    "CredentialPresence",
    "DEFAULT_OPTIONS",
    "DecoderOptions",
    "STRICT_KEY_FIELDS_ENV",
]

LOGGER = logging.getLogger("webauthn_decoder.config")

CREDENTIAL_PRESENCE_ENV = "WEBAUTHN_DECODER_CREDENTIAL_PRESENCE"
STRICT_KEY_FIELDS_ENV = "WEBAUTHN_DECODER_STRICT_KEY_FIELDS"


@unique
class CredentialPresence(str, Enum):
    """How the parser decides whether attested credential data follows."""

    #: Parse the block when more than 16 bytes follow the sign counter.
    REMAINING_LENGTH = "length"
    #: Parse the block only when the AT flag is set.
    FLAG = "flag"


def _env_flag(environ: Mapping[str, str], name: str) -> Optional[bool]:
    """Return ``True`` or ``False`` when the named env var is explicitly set."""

    raw_value = environ.get(name)
    if raw_value is None:
        return None

    normalised = raw_value.strip().lower()
    if normalised in {"", "0", "false", "off", "no"}:
        return False
    return True


def _parse_presence(raw_value: Optional[str]) -> Optional[CredentialPresence]:
    if raw_value is None:
        return None

    normalised = raw_value.strip().lower()
    for policy in CredentialPresence:
        if normalised in {policy.value, policy.name.lower()}:
            return policy
    LOGGER.warning(
        "Ignoring unknown %s value %r; expected one of %s",
        CREDENTIAL_PRESENCE_ENV,
        raw_value,
        ", ".join(policy.value for policy in CredentialPresence),
    )
    return None


@dataclass(frozen=True)
class DecoderOptions:
    """Policy choices applied while decoding.

    :param credential_presence: Rule deciding whether attested credential
        data is parsed from the authenticator data.
    :param strict_key_fields: Reject non-integer key type, algorithm and curve
        values in a credential public key instead of reading them as 0.
    """

    credential_presence: CredentialPresence = CredentialPresence.REMAINING_LENGTH
    strict_key_fields: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DecoderOptions":
        """Build options from ``WEBAUTHN_DECODER_*`` environment variables."""

        if environ is None:
            environ = os.environ

        defaults = cls()
        presence = _parse_presence(environ.get(CREDENTIAL_PRESENCE_ENV))
        strict = _env_flag(environ, STRICT_KEY_FIELDS_ENV)
        return cls(
            credential_presence=presence or defaults.credential_presence,
            strict_key_fields=defaults.strict_key_fields if strict is None else strict,
        )


DEFAULT_OPTIONS = DecoderOptions()
