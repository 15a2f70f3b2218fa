"""
Envelope format configuration for LatArchiver password-protected payloads.

Envelope layout:
  - salt (16 bytes, random per encryption)
  - nonce (12 bytes, random per encryption)
  - ciphertext (variable, same length as the plaintext)
  - tag (16 bytes, AES-GCM authentication tag)

There is no version byte and no length prefix; the ciphertext length is the
total length minus ENVELOPE_OVERHEAD.
"""

SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32

KDF_ITERATIONS = 100_000

HEADER_SIZE = SALT_SIZE + NONCE_SIZE
ENVELOPE_OVERHEAD = HEADER_SIZE + TAG_SIZE
MIN_ENVELOPE_SIZE = ENVELOPE_OVERHEAD

ZERO_SALT = bytes(SALT_SIZE)
ZERO_NONCE = bytes(NONCE_SIZE)


def split_envelope(data: bytes) -> tuple[bytes, bytes, bytes, bytes]:
    """Split envelope bytes into (salt, nonce, ciphertext, tag). Length is not checked."""
    salt = data[:SALT_SIZE]
    nonce = data[SALT_SIZE:HEADER_SIZE]
    ciphertext = data[HEADER_SIZE:len(data) - TAG_SIZE]
    tag = data[len(data) - TAG_SIZE:]
    return salt, nonce, ciphertext, tag
