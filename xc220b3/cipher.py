"""
Tag-as-nonce Authenticated Encryption

Messages are authenticated with a BLAKE3 tag computed over the plaintext
followed by the key, and the same 24-byte tag is used as the XChaCha20
nonce. The wire format carries no separate nonce:

    ciphertext (len(plaintext) bytes) || tag (24 bytes)

Because the nonce is a function of the plaintext, encrypting the same
plaintext twice under one key produces identical output. Observers can
therefore tell when a message repeats.
"""

import logging

from blake3 import blake3
from Crypto.Cipher import ChaCha20

from .primitives import (
    SYMMETRIC_KEY_SIZE,
    MacMismatch,
    MalformedCiphertext,
    constant_time_compare,
)


logger = logging.getLogger(__name__)

KEY_SIZE = SYMMETRIC_KEY_SIZE
TAG_SIZE = 24


class AuthenticatedCipher:
    """
    MAC, encrypt and decrypt under a single 32-byte key.

    Holds private scratch state: a BLAKE3 hasher that is returned to its
    empty state after every digest, and a stream cipher that is rebuilt on
    every call with the per-message nonce. Not safe for concurrent use.
    """

    def __init__(self, key: bytes):
        """
        Args:
            key: 32-byte symmetric key
        """
        if len(key) != KEY_SIZE:
            raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")

        self._key = bytes(key)
        self._hasher = blake3()
        self._stream = None

    @property
    def key(self) -> bytes:
        return self._key

    def _reset_hasher(self):
        self._hasher = blake3()

    def _init_stream(self, nonce: bytes):
        # 24-byte nonce selects XChaCha20
        self._stream = ChaCha20.new(key=self._key, nonce=nonce)
        return self._stream

    def mac(self, plaintext: bytes) -> bytes:
        """
        Compute the 24-byte authentication tag of a message.

        Args:
            plaintext: Message to authenticate

        Returns:
            BLAKE3 extendable output of plaintext || key, 24 bytes
        """
        self._hasher.update(plaintext)
        self._hasher.update(self._key)
        tag = self._hasher.digest(length=TAG_SIZE)
        self._reset_hasher()

        logger.debug("MAC: %s", tag.hex())
        return tag

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        Encrypt and authenticate a message.

        Args:
            plaintext: Message to encrypt

        Returns:
            ciphertext + tag (24 bytes)
        """
        tag = self.mac(plaintext)
        ciphertext = self._init_stream(tag).encrypt(plaintext)
        return ciphertext + tag

    def decrypt(self, data: bytes) -> bytes:
        """
        Decrypt a message and verify its tag.

        Args:
            data: ciphertext + tag

        Returns:
            Decrypted plaintext

        Raises:
            MalformedCiphertext: If data is shorter than the tag
            MacMismatch: If the recomputed tag differs from the claimed one
        """
        if len(data) < TAG_SIZE:
            raise MalformedCiphertext(
                f"Ciphertext too short: {len(data)} bytes, need at least {TAG_SIZE}"
            )

        split = len(data) - TAG_SIZE
        ciphertext, claimed_tag = bytes(data[:split]), bytes(data[split:])

        candidate = self._init_stream(claimed_tag).decrypt(ciphertext)
        calculated_tag = self.mac(candidate)

        if not constant_time_compare(calculated_tag, claimed_tag):
            logger.debug("Claimed MAC: %s", claimed_tag.hex())
            logger.debug("Calculated MAC: %s", calculated_tag.hex())
            logger.warning("Rejected message with mismatched MAC", extra={"length": len(data)})
            raise MacMismatch("Message authentication failed")

        return candidate


def compute_mac(plaintext: bytes, key: bytes) -> bytes:
    """Tag of ``plaintext`` under ``key`` using a throwaway cipher"""
    return AuthenticatedCipher(key).mac(plaintext)


def encrypt_message(key: bytes, plaintext: bytes) -> bytes:
    """
    Encrypt a message using the tag-as-nonce construction.

    Args:
        key: 32-byte encryption key
        plaintext: Message to encrypt

    Returns:
        ciphertext + tag (24 bytes)
    """
    return AuthenticatedCipher(key).encrypt(plaintext)


def decrypt_message(key: bytes, data: bytes) -> bytes:
    """
    Decrypt a message produced by :func:`encrypt_message`.

    Args:
        key: 32-byte encryption key
        data: ciphertext + tag

    Returns:
        Decrypted plaintext

    Raises:
        MalformedCiphertext: If data is shorter than the tag
        MacMismatch: If authentication fails
    """
    return AuthenticatedCipher(key).decrypt(data)
