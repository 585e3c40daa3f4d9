from typing import Any, Dict, Iterable, Optional

import cbor2
import pytest
from cryptography.hazmat.primitives.asymmetric import ec

RP_ID_HASH = bytes(range(32))
AAGUID = bytes.fromhex("f8a011f38c0a4d15800617111f9edc7d")
CREDENTIAL_ID = bytes.fromhex("00112233445566778899aabbccddeeff")
X_COORDINATE = bytes(range(0x40, 0x60))
Y_COORDINATE = bytes(range(0x60, 0x80))


def _cose_key_map(
    x: Any = X_COORDINATE,
    y: Any = Y_COORDINATE,
    overrides: Optional[Dict[int, Any]] = None,
    drop: Iterable[int] = (),
) -> Dict[int, Any]:
    cose_map = {1: 2, 3: -7, -1: 1, -2: x, -3: y}
    cose_map.update(overrides or {})
    for label in drop:
        cose_map.pop(label, None)
    return cose_map


def _auth_data(
    flags: int = 0x41,
    sign_count: int = 7,
    attested: bool = True,
    aaguid: bytes = AAGUID,
    credential_id: bytes = CREDENTIAL_ID,
    credential_id_length: Optional[int] = None,
    public_key: Optional[bytes] = None,
    tail: bytes = b"",
) -> bytes:
    data = RP_ID_HASH + bytes([flags]) + sign_count.to_bytes(4, "big")
    if attested:
        if credential_id_length is None:
            credential_id_length = len(credential_id)
        if public_key is None:
            public_key = cbor2.dumps(_cose_key_map())
        data += aaguid + credential_id_length.to_bytes(2, "big") + credential_id + public_key
    return data + tail


def _attestation_object(
    auth_data: Any,
    fmt: str = "packed",
    att_stmt: Optional[Dict[str, Any]] = None,
) -> bytes:
    if att_stmt is None:
        att_stmt = {"alg": -7, "sig": b"\x30\x44" + b"\x01" * 68}
    return cbor2.dumps({"fmt": fmt, "attStmt": att_stmt, "authData": auth_data})


@pytest.fixture
def cose_key_map():
    return _cose_key_map


@pytest.fixture
def make_auth_data():
    return _auth_data


@pytest.fixture
def make_attestation_object():
    return _attestation_object


@pytest.fixture
def p256_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def p256_cose_map(p256_private_key) -> Dict[int, Any]:
    numbers = p256_private_key.public_key().public_numbers()
    return _cose_key_map(numbers.x.to_bytes(32, "big"), numbers.y.to_bytes(32, "big"))
