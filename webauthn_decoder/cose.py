"""Credential public keys carried in attested credential data."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ec
from fido2.cose import CoseKey, UnsupportedKey

from .constants import (
    COORDINATE_LENGTH,
    COSE_CURVE_P256,
    COSE_CURVE_SECP256K1,
    COSE_KEY_ALG,
    COSE_KEY_CURVE,
    COSE_KEY_TYPE,
    COSE_KEY_X,
    COSE_KEY_Y,
    ECDSA_UNCOMPRESSED_PREFIX,
    ECDSA_Y_PREFIX_EVEN,
    ECDSA_Y_PREFIX_ODD,
    CoseAlgorithm,
)
from .document import Document, Map
from .errors import MalformedInput, MissingField, UnsupportedFormat

__all__ = [
    "CompressedCoordinates",
    "Coordinates",
    "CredentialPublicKey",
    "UncompressedCoordinates",
]

LOGGER = logging.getLogger("webauthn_decoder.cose")

_CURVES = {
    COSE_CURVE_P256: (ec.SECP256R1, CoseAlgorithm.ES256),
    COSE_CURVE_SECP256K1: (ec.SECP256K1, CoseAlgorithm.ES256K),
}


@dataclass(frozen=True)
class CompressedCoordinates:
    """A point given by its X coordinate and the SEC1 prefix of its Y parity."""

    x: bytes
    sign: int


@dataclass(frozen=True)
class UncompressedCoordinates:
    x: bytes
    y: bytes


Coordinates = Union[CompressedCoordinates, UncompressedCoordinates]


def _read_integer(cose: Map, label: int, name: str, strict: bool) -> int:
    value = cose.get_int(label)
    if value is None:
        raise MissingField(name)
    number = value.as_int()
    if number is None:
        if strict:
            raise MalformedInput(f"{name} must be an integer, got {value.kind}")
        LOGGER.debug("Reading non-integer %s (%s) as 0", name, value.kind)
        return 0
    return number


def _read_coordinate(value: Document, name: str) -> bytes:
    raw = value.as_bytes()
    if raw is None:
        raise MalformedInput(f"{name} must be a byte string, got {value.kind}")
    if len(raw) < COORDINATE_LENGTH:
        raise MalformedInput(
            f"{name} must be at least {COORDINATE_LENGTH} bytes, got {len(raw)}"
        )
    return raw[:COORDINATE_LENGTH]


@dataclass(frozen=True)
class CredentialPublicKey:
    """An elliptic curve public key extracted from a COSE_Key map.

    :param key_type: COSE key type (label 1).
    :param alg: COSE algorithm identifier (label 3).
    :param curve: COSE curve identifier (label -1).
    :param coordinates: Either compressed or uncompressed point coordinates.
    """

    key_type: int
    alg: int
    curve: int
    coordinates: Coordinates

    @classmethod
    def from_document(cls, document: Document, strict: bool = False) -> "CredentialPublicKey":
        """Extract a public key from a decoded COSE_Key.

        Keys are looked up by label, so the order of the map entries does not
        matter. A document that is not a map has none of the required labels.

        :param document: The decoded COSE_Key.
        :param strict: Reject non-integer key type, algorithm and curve values
            instead of reading them as 0.
        """

        cose = document.as_map()
        if cose is None:
            cose = Map()

        key_type = _read_integer(cose, COSE_KEY_TYPE, "key type", strict)
        alg = _read_integer(cose, COSE_KEY_ALG, "algorithm", strict)
        curve = _read_integer(cose, COSE_KEY_CURVE, "curve", strict)

        x_value = cose.get_int(COSE_KEY_X)
        if x_value is None:
            raise MissingField("x coordinate")
        x = _read_coordinate(x_value, "x coordinate")

        y_value = cose.get_int(COSE_KEY_Y)
        coordinates: Coordinates
        if y_value is not None and y_value.as_bytes() is not None:
            coordinates = UncompressedCoordinates(x, _read_coordinate(y_value, "y coordinate"))
        elif y_value is not None and y_value.as_bool() is not None:
            sign = ECDSA_Y_PREFIX_ODD if y_value.as_bool() else ECDSA_Y_PREFIX_EVEN
            coordinates = CompressedCoordinates(x, sign)
        else:
            raise MissingField("y coordinate")

        LOGGER.debug(
            "Extracted %s public key (kty=%d, alg=%d, crv=%d)",
            "compressed" if isinstance(coordinates, CompressedCoordinates) else "uncompressed",
            key_type,
            alg,
            curve,
        )
        return cls(key_type, alg, curve, coordinates)

    @property
    def compressed(self) -> bool:
        return isinstance(self.coordinates, CompressedCoordinates)

    def encoded_point(self) -> bytes:
        """Return the SEC1 encoding of the public point."""
        coordinates = self.coordinates
        if isinstance(coordinates, CompressedCoordinates):
            return bytes([coordinates.sign]) + coordinates.x
        return bytes([ECDSA_UNCOMPRESSED_PREFIX]) + coordinates.x + coordinates.y

    def to_cryptography_key(self) -> ec.EllipticCurvePublicKey:
        """Rebuild the key as a Cryptography public key object.

        Compressed points are decompressed by Cryptography. This does not check
        anything a signature verifier has to check.
        """
        try:
            curve_cls, _ = _CURVES[self.curve]
        except KeyError:
            raise UnsupportedFormat(f"Unsupported COSE curve: {self.curve}") from None
        try:
            return ec.EllipticCurvePublicKey.from_encoded_point(
                curve_cls(), self.encoded_point()
            )
        except ValueError as exc:
            raise MalformedInput(f"Coordinates are not a point on the curve: {exc}") from exc

    def to_cose_key(self) -> CoseKey:
        """Hand the key over as a python-fido2 :class:`~fido2.cose.CoseKey`."""
        expected_alg = _CURVES.get(self.curve, (None, None))[1]
        cose_cls = CoseKey.for_alg(self.alg)
        if cose_cls is UnsupportedKey or self.alg != expected_alg:
            raise UnsupportedFormat(
                f"Unsupported COSE algorithm {self.alg} for curve {self.curve}"
            )
        return cose_cls.from_cryptography_key(self.to_cryptography_key())
