import cbor2
import pytest
from fido2.webauthn import AuthenticatorData as Fido2AuthenticatorData

from webauthn_decoder.authdata import parse_authenticator_data
from webauthn_decoder.config import CredentialPresence, DecoderOptions
from webauthn_decoder.cose import CompressedCoordinates, UncompressedCoordinates
from webauthn_decoder.document import Map, Text
from webauthn_decoder.errors import EncodingError, MalformedInput, MissingField, Truncation

RP_ID_HASH = bytes(range(32))
AAGUID = bytes.fromhex("f8a011f38c0a4d15800617111f9edc7d")
CREDENTIAL_ID = bytes.fromhex("00112233445566778899aabbccddeeff")

FLAG_POLICY = DecoderOptions(credential_presence=CredentialPresence.FLAG)


@pytest.mark.parametrize(
    "length, field",
    [(0, "rpIdHash"), (20, "rpIdHash"), (31, "rpIdHash"), (32, "flags"), (33, "signCount"), (36, "signCount")],
)
def test_input_shorter_than_fixed_header_is_truncated(length, field):
    with pytest.raises(Truncation) as exc_info:
        parse_authenticator_data(bytes(range(length)))

    assert exc_info.value.field == field


def test_fixed_fields_without_credential_data(make_auth_data):
    data = make_auth_data(flags=0x05, sign_count=0x01020304, attested=False)

    auth_data, raw = parse_authenticator_data(data)

    assert len(data) == 37
    assert auth_data.rp_id_hash == RP_ID_HASH
    assert auth_data.flags == 0x05
    assert auth_data.sign_count == 0x01020304
    assert auth_data.attested_credential_data is None
    assert auth_data.extensions is None
    assert raw == data


def test_attested_credential_data(make_auth_data):
    data = make_auth_data()

    auth_data, raw = parse_authenticator_data(data)

    credential = auth_data.attested_credential_data
    assert credential.aaguid == AAGUID
    assert str(credential.aaguid_uuid) == "f8a011f3-8c0a-4d15-8006-17111f9edc7d"
    assert credential.credential_id == CREDENTIAL_ID
    assert isinstance(credential.credential_public_key.coordinates, UncompressedCoordinates)
    assert raw == data


def test_raw_bytes_are_the_whole_input_not_the_remainder(make_auth_data):
    data = bytearray(make_auth_data())

    _, raw = parse_authenticator_data(data)

    assert isinstance(raw, bytes)
    assert raw == bytes(data)


def test_credential_id_length_is_honoured(make_auth_data, cose_key_map):
    credential_id = b"\x42" * 70
    data = make_auth_data(
        credential_id=credential_id, public_key=cbor2.dumps(cose_key_map(y=True))
    )

    auth_data, _ = parse_authenticator_data(data)

    credential = auth_data.attested_credential_data
    assert credential.credential_id == credential_id
    assert isinstance(credential.credential_public_key.coordinates, CompressedCoordinates)


def test_truncated_credential_id(make_auth_data):
    data = make_auth_data(credential_id=b"\x01" * 4, credential_id_length=16, public_key=b"")

    with pytest.raises(Truncation) as exc_info:
        parse_authenticator_data(data)

    assert exc_info.value.field == "credentialId"
    assert exc_info.value.expected == 16
    assert exc_info.value.available == 4


def test_sixteen_trailing_bytes_are_not_credential_data(make_auth_data):
    data = make_auth_data(attested=False, tail=b"\x00" * 16)

    auth_data, raw = parse_authenticator_data(data)

    assert auth_data.attested_credential_data is None
    assert raw == data


def test_seventeen_trailing_bytes_truncate_credential_id_length(make_auth_data):
    data = make_auth_data(attested=False, tail=b"\x00" * 17)

    with pytest.raises(Truncation) as exc_info:
        parse_authenticator_data(data)

    assert exc_info.value.field == "credentialIdLength"


def test_length_heuristic_ignores_attested_flag(make_auth_data):
    data = make_auth_data(flags=0x01)

    auth_data, _ = parse_authenticator_data(data)

    assert not auth_data.attested_credential_data_included
    assert auth_data.attested_credential_data is not None


def test_malformed_public_key_document(make_auth_data):
    with pytest.raises(EncodingError):
        parse_authenticator_data(make_auth_data(public_key=b"\xa5\x01\x02"))


def test_missing_public_key_document(make_auth_data):
    with pytest.raises(EncodingError):
        parse_authenticator_data(make_auth_data(public_key=b""))


def test_trailing_extensions_are_rejected_by_length_heuristic(make_auth_data):
    data = make_auth_data(flags=0xC1, tail=cbor2.dumps({"credProtect": 2}))

    with pytest.raises(EncodingError, match="trailing bytes"):
        parse_authenticator_data(data)


def test_key_extraction_errors_propagate(make_auth_data, cose_key_map):
    data = make_auth_data(public_key=cbor2.dumps(cose_key_map(drop=[-2])))

    with pytest.raises(MissingField, match="x coordinate"):
        parse_authenticator_data(data)


def test_strict_key_fields_option_is_applied(make_auth_data, cose_key_map):
    data = make_auth_data(public_key=cbor2.dumps(cose_key_map(overrides={1: "EC2"})))

    auth_data, _ = parse_authenticator_data(data)
    assert auth_data.attested_credential_data.credential_public_key.key_type == 0

    with pytest.raises(MalformedInput):
        parse_authenticator_data(data, DecoderOptions(strict_key_fields=True))


def test_flag_helpers(make_auth_data):
    auth_data, _ = parse_authenticator_data(make_auth_data(flags=0x5D, attested=False))

    assert auth_data.user_present
    assert auth_data.user_verified
    assert auth_data.backup_eligible
    assert auth_data.backed_up
    assert auth_data.attested_credential_data_included
    assert not auth_data.extension_data_included


def test_flag_policy_skips_block_without_attested_flag(make_auth_data):
    auth_data, _ = parse_authenticator_data(make_auth_data(flags=0x01, attested=False), FLAG_POLICY)

    assert auth_data.attested_credential_data is None


def test_flag_policy_requires_block_when_attested_flag_set(make_auth_data):
    with pytest.raises(Truncation, match="aaguid"):
        parse_authenticator_data(make_auth_data(flags=0x41, attested=False), FLAG_POLICY)


def test_flag_policy_decodes_extensions(make_auth_data):
    data = make_auth_data(flags=0xC5, tail=cbor2.dumps({"credProtect": 2}))

    auth_data, raw = parse_authenticator_data(data, FLAG_POLICY)

    assert auth_data.attested_credential_data.credential_id == CREDENTIAL_ID
    assert isinstance(auth_data.extensions, Map)
    assert auth_data.extensions.get_text("credProtect").as_int() == 2
    assert raw == data


def test_flag_policy_decodes_extensions_without_credential(make_auth_data):
    data = make_auth_data(flags=0x81, attested=False, tail=cbor2.dumps({"hmac-secret": True}))

    auth_data, _ = parse_authenticator_data(data, FLAG_POLICY)

    assert auth_data.attested_credential_data is None
    assert Text("hmac-secret") in auth_data.extensions


def test_flag_policy_rejects_unclaimed_bytes(make_auth_data):
    data = make_auth_data(flags=0x41, tail=b"\x00")

    with pytest.raises(MalformedInput, match="1 unexpected trailing bytes"):
        parse_authenticator_data(data, FLAG_POLICY)


def test_matches_fido2_parser(make_auth_data, p256_cose_map):
    data = make_auth_data(flags=0x45, sign_count=99, public_key=cbor2.dumps(p256_cose_map))

    auth_data, _ = parse_authenticator_data(data)
    reference = Fido2AuthenticatorData(data)

    assert auth_data.rp_id_hash == reference.rp_id_hash
    assert auth_data.flags == reference.flags
    assert auth_data.sign_count == reference.counter
    credential = auth_data.attested_credential_data
    assert credential.aaguid == bytes(reference.credential_data.aaguid)
    assert credential.credential_id == reference.credential_data.credential_id
    assert dict(credential.credential_public_key.to_cose_key()) == dict(
        reference.credential_data.public_key
    )
