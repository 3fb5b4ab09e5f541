# essfirmware

`essfirmware` models a small microcontroller application on the host. The
application is an encryption service that takes framed requests over a byte
stream and answers with framed ciphertext. Around it are helpers for the
board: Morse signalling on an LED, memory protection unit register values,
USB descriptors and a Salsa20-based random generator.

## Modules

- `essfirmware.base64url`: base64 with the URL-safe alphabet (`-` and `_`)
  and `=` padding.
  - `encode(data, limit=None)` returns the padded encoding, cut to `limit`
    characters when given.
  - `decode(text, max_length=None)` accepts `str` or bytes, checks the whole
    input and raises `DecodeError` (a `ValueError`) on a bad length, a bad
    character or misplaced padding. With `max_length` only that many
    decoded bytes are returned.
  - `isbase64(ch)` tells whether a character or byte value is in the
    alphabet; `=` is not.
  - `base64_length(inlen)` is the padded encoded length of `inlen` bytes.
- `essfirmware.crypto`: a deliberately weak cipher. `encrypt(plaintext,
  nonce, key)` XORs every byte with `key[nonce[0] % 8]`; plaintexts over
  128 bytes (`BUFFER_SIZE`) raise `ValueError`. `ciphertext_length` returns
  the plaintext length. `NONCE_BYTES` is 24.
- `essfirmware.packetizer`: the framing protocol.
  - A request is `SOH`, a base64url header, `STX`, base64url text, `ETX`.
    The header holds a 3-byte little-endian count of the text's base64url
    characters, followed by the 24-byte nonce.
  - A response is `STX`, base64url ciphertext, `ETX`.
  - `receive(source)` skips to the next `SOH` and returns a `Plaintext`
    (`text`, `nonce`). `read_header` and `read_text` read the two parts on
    their own. Sources are iterables of byte values; running out raises
    `EOFError`.
  - `encode_packet` builds a response, `send` also writes it to a binary
    sink, and `build_request(text, nonce)` builds what a client sends.
  - Framing faults raise `PacketError`, whose `code` is an `ErrorCode`.
- `essfirmware.service`: `EncryptionService(key, cipher, nonce_source)`
  answers requests. `Cipher.XOR` uses `crypto.encrypt` with the default
  key of eight `0x42` bytes; `Cipher.SECRETBOX` uses PyNaCl's `SecretBox`
  with a 32-byte key, and the answer holds the ciphertext with its
  authentication tag but without the nonce. `handle(source)` returns one
  response packet or `None` for a rejected request; `serve(source, sink)`
  writes responses until the source is exhausted and returns how many were
  written. `derive_key(chip_id)` builds a 32-byte key from a 16-byte chip
  identifier: a zero byte followed by the identifier repeated.
- `essfirmware.rng`: `Salsa20Random(entropy=None)` seeds its nonce from a
  BLAKE2b hash of a memory image (or of operating-system randomness when
  none is given) and offers `random()` for 32-bit words, `buf(size)` for
  bytes, `stir()` and `implementation_name()`. Given the same image it
  produces the same output. `salsa20_stream` and `salsa20_xor` expose the
  Salsa20 keystream for 8-byte nonces and 32-byte keys.
- `essfirmware.morse`: Morse code for letters and digits; other characters
  are dropped. `to_morse` returns the codes of each word, `timeline` the
  LED schedule as `Signal(on, duration_ms)` entries with a 100 ms dot,
  and `total_duration` its length in milliseconds. `ButtonMessenger`
  returns what to signal on a button press: button 1 gives the fixed
  message `"I CAN MORSE"`, button 2 the milliseconds between the last two
  presses of button 1.
- `essfirmware.mpu`: `MpuConfig` describes a region (base address,
  `Permission` plus the `EXECUTE_NEVER` and `ENABLE_REGION` flags, size as
  a power of two, priority slot). `rbar_value` and `rasr_value` compute the
  register values; `Mpu` is a simulated unit with `enable`, `disable` and
  `configure`. `STACK_REGION` is the 64 KiB non-executable read-write
  region at `0x10000000`.
- `essfirmware.descriptors`: the USB CDC ACM device's descriptors as bytes:
  `device_descriptor`, `configuration_descriptor`, `string_descriptor`,
  `language_descriptor`, and `get_descriptor(w_value, w_index)`, which
  returns `None` for an unknown request. `version_bcd` and
  `DescriptorType` are the helpers they use.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
```

## Command line

```
essfirmware
```

This reads requests from standard input and writes responses to standard
output until the input ends. Options:

- `--cipher {xor,secretbox}`: the cipher, `xor` by default.
- `--chip-id HEX`: the 16-byte chip identifier in hex from which the
  secretbox key is derived; all zeros by default.
- `--input FILE`, `--output FILE`: read from or write to files instead.

## Library use

```python
from essfirmware import base64url, morse, packetizer
from essfirmware.service import EncryptionService

print(base64url.base64_length(27))   # 36, the encoded size of a header
print(morse.to_morse("I CAN MORSE"))
print(morse.total_duration("SOS"))

request = packetizer.build_request(b"hello", bytes(24))
response = EncryptionService().handle(request)
```

## What it does not do

The package works on byte streams and files only. It does not open a
serial port or act as a USB device, does not drive an LED, read buttons or
program a real memory protection unit; those parts compute values and
schedules only. The service takes its nonces from the request and does not
use `Salsa20Random`.

## Tests

```
pytest
```