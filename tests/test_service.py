import io

import pytest
from nacl.secret import SecretBox

from essfirmware.base64url import decode
from essfirmware.packetizer import ETX, SOH, STX, build_request, encode_packet
from essfirmware.service import EncryptionService, derive_key, main

NONCE = bytes([3]) + bytes(23)
CHIP_ID = bytes(range(16))


def _payload(packet: bytes) -> bytes:
    assert packet[0] == STX and packet[-1] == ETX
    return decode(packet[1:-1])


def test_derive_key_layout():
    key = derive_key(CHIP_ID)
    assert len(key) == 32
    assert key == bytes([0]) + CHIP_ID + CHIP_ID[:15]


def test_derive_key_rejects_wrong_length():
    with pytest.raises(ValueError):
        derive_key(bytes(15))


def test_xor_handle():
    service = EncryptionService()
    response = service.handle(build_request(b"hello", NONCE))
    assert response == encode_packet(bytes(b ^ 0x42 for b in b"hello"))


def test_xor_handle_skips_leading_noise():
    service = EncryptionService()
    response = service.handle(b"noise" + build_request(b"abc", NONCE))
    assert _payload(response) == bytes(b ^ 0x42 for b in b"abc")


def test_malformed_packet_gives_no_response():
    service = EncryptionService()
    assert service.handle(bytes([SOH, ord("!"), 0, 0])) is None


def test_oversize_plaintext_gives_no_response():
    service = EncryptionService()
    assert service.handle(build_request(bytes(129), NONCE)) is None


def test_handle_on_empty_source_raises_eof():
    with pytest.raises(EOFError):
        EncryptionService().handle(b"")


def test_secretbox_round_trip():
    key = derive_key(CHIP_ID)
    service = EncryptionService(key=key, cipher="secretbox")
    response = service.handle(build_request(b"top secret text", NONCE))
    ciphertext = _payload(response)
    assert len(ciphertext) == len(b"top secret text") + 16
    assert SecretBox(key).decrypt(ciphertext, NONCE) == b"top secret text"


def test_secretbox_requires_long_key():
    with pytest.raises(ValueError):
        EncryptionService(key=bytes(8), cipher="secretbox")


def test_serve_answers_each_valid_request():
    stream = (build_request(b"one", NONCE) + bytes([SOH, ord("!")])
              + build_request(b"two", NONCE))
    sink = io.BytesIO()
    count = EncryptionService().serve(stream, sink)
    assert count == 2
    expected = (encode_packet(bytes(b ^ 0x42 for b in b"one"))
                + encode_packet(bytes(b ^ 0x42 for b in b"two")))
    assert sink.getvalue() == expected


def test_main_with_files(tmp_path):
    source = tmp_path / "in.bin"
    target = tmp_path / "out.bin"
    source.write_bytes(build_request(b"file data", NONCE))
    assert main(["--input", str(source), "--output", str(target)]) == 0
    assert _payload(target.read_bytes()) == bytes(b ^ 0x42 for b in b"file data")


def test_main_secretbox(tmp_path):
    source = tmp_path / "in.bin"
    target = tmp_path / "out.bin"
    source.write_bytes(build_request(b"boxed", NONCE))
    assert main(["--cipher", "secretbox", "--chip-id", CHIP_ID.hex(),
                 "--input", str(source), "--output", str(target)]) == 0
    ciphertext = _payload(target.read_bytes())
    assert SecretBox(derive_key(CHIP_ID)).decrypt(ciphertext, NONCE) == b"boxed"