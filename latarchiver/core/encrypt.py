# core/encrypt.py
import logging
from typing import Union

from nacl.utils import random as nacl_random

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import AuthenticationFailure, LikelyCorruptError, TooShortError
from .format_config import (
    KDF_ITERATIONS,
    KEY_SIZE,
    MIN_ENVELOPE_SIZE,
    NONCE_SIZE,
    SALT_SIZE,
    TAG_SIZE,
    ZERO_NONCE,
    ZERO_SALT,
    split_envelope,
)

logger = logging.getLogger(__name__)

Password = Union[str, bytes, bytearray]


def _password_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    if isinstance(password, (bytes, bytearray)):
        return bytes(password)
    raise TypeError("password must be str, bytes, or bytearray")


def derive_key_from_password(password: Password, salt: bytes) -> bytes:
    """
    Derive a 256-bit key from the password with PBKDF2-HMAC-SHA256.

    The iteration count is fixed so envelopes stay readable without any
    stored KDF parameters.
    """
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=bytes(salt),
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(_password_bytes(password))


def seal(key: bytes, nonce: bytes, plaintext: bytes, associated_data: bytes = b"") -> tuple[bytes, bytes]:
    """AES-256-GCM encrypt. Returns (ciphertext, tag) with the tag detached."""
    sealed = AESGCM(key).encrypt(nonce, plaintext, associated_data or None)
    return sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]


def open_sealed(key: bytes, nonce: bytes, ciphertext: bytes, tag: bytes, associated_data: bytes = b"") -> bytes:
    """
    AES-256-GCM decrypt. The tag is verified before any plaintext is returned.
    """
    if len(tag) != TAG_SIZE:
        raise AuthenticationFailure("Decryption failed: wrong password or corrupted data")
    try:
        return AESGCM(key).decrypt(nonce, bytes(ciphertext) + bytes(tag), associated_data or None)
    except InvalidTag as exc:
        raise AuthenticationFailure("Decryption failed: wrong password or corrupted data") from exc


def encrypt_bytes(plaintext: bytes, password: Password) -> bytes:
    """
    Encrypt plaintext into a self-describing envelope:
    salt(16) + nonce(12) + ciphertext + tag(16).
    """
    salt = nacl_random(SALT_SIZE)
    nonce = nacl_random(NONCE_SIZE)
    key = derive_key_from_password(password, salt)
    ciphertext, tag = seal(key, nonce, plaintext)
    return salt + nonce + ciphertext + tag


def decrypt_bytes(envelope: bytes, password: Password) -> bytes:
    """Open an envelope produced by encrypt_bytes. Cheap sanity checks run before key derivation."""
    if len(envelope) < MIN_ENVELOPE_SIZE:
        raise TooShortError("Invalid encrypted data: too short")

    salt, nonce, ciphertext, tag = split_envelope(bytes(envelope))

    # Random salts/nonces are never all zero in practice; this catches
    # zeroed-out files before paying for the KDF.
    if salt == ZERO_SALT or nonce == ZERO_NONCE:
        logger.debug("Rejecting envelope with zeroed salt or nonce")
        raise LikelyCorruptError("Invalid encrypted data: possible zeroed or corrupted file")

    key = derive_key_from_password(password, salt)
    return open_sealed(key, nonce, ciphertext, tag)
