import pytest

from essfirmware.crypto import BUFFER_SIZE, NONCE_BYTES, ciphertext_length, encrypt

KEY = bytes([0x42] * 8)


def test_zero_plaintext_reveals_key_byte():
    assert encrypt(bytes(4), bytes(NONCE_BYTES), KEY) == bytes([0x42] * 4)


def test_encrypt_twice_is_identity():
    plaintext = b"attack at dawn"
    nonce = bytes([5] * NONCE_BYTES)
    key = bytes(range(1, 9))
    assert encrypt(encrypt(plaintext, nonce, key), nonce, key) == plaintext


@pytest.mark.parametrize("first", [0, 3, 7, 8, 13, 255])
def test_key_byte_selected_by_nonce(first):
    key = bytes(range(10, 18))
    plaintext = b"sample text"
    nonce = bytes([first]) + bytes(NONCE_BYTES - 1)
    ciphertext = encrypt(plaintext, nonce, key)
    assert {p ^ c for p, c in zip(plaintext, ciphertext)} == {key[first % 8]}


def test_output_length_matches_input():
    for n in (0, 1, 64, BUFFER_SIZE):
        assert len(encrypt(bytes(n), bytes(NONCE_BYTES), KEY)) == n


def test_plaintext_larger_than_buffer_rejected():
    with pytest.raises(ValueError):
        encrypt(bytes(BUFFER_SIZE + 1), bytes(NONCE_BYTES), KEY)


def test_empty_nonce_rejected():
    with pytest.raises(ValueError):
        encrypt(b"abc", b"", KEY)


def test_short_key_rejected():
    with pytest.raises(ValueError):
        encrypt(b"abc", bytes([7]), b"\x01\x02")


def test_nonce_size_constant():
    assert NONCE_BYTES == 192 // 8
    assert ciphertext_length(NONCE_BYTES) == NONCE_BYTES


@pytest.mark.parametrize("n", [0, 1, 27, 1000])
def test_ciphertext_length_equals_plaintext_length(n):
    assert ciphertext_length(n) == n