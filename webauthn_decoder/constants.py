"""Constants shared with the components that consume decoded attestations."""
from __future__ import annotations

from enum import IntEnum, unique

WEBAUTHN_CHALLENGE_LENGTH = 32
WEBAUTHN_CREDENTIAL_ID_LENGTH = 16


@unique
class CoseAlgorithm(IntEnum):
    """COSE algorithm identifiers an external verifier selects between."""

    ES256 = -7
    ES256K = -47
    RS256 = -257


COSE_ALGORITHM_ES256 = CoseAlgorithm.ES256
COSE_ALGORITHM_RS256 = CoseAlgorithm.RS256

# Fixed authenticator data layout.
RP_ID_HASH_LENGTH = 32
AAGUID_LENGTH = 16

# COSE_Key map labels.
COSE_KEY_TYPE = 1
COSE_KEY_ALG = 3
COSE_KEY_CURVE = -1
COSE_KEY_X = -2
COSE_KEY_Y = -3

COORDINATE_LENGTH = 32

# SEC1 point prefixes.
ECDSA_Y_PREFIX_EVEN = 0x02
ECDSA_Y_PREFIX_ODD = 0x03
ECDSA_UNCOMPRESSED_PREFIX = 0x04

# COSE elliptic curve identifiers with 32 byte coordinates.
COSE_CURVE_P256 = 1
COSE_CURVE_SECP256K1 = 8
