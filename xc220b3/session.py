"""
Secure Channel Session

A session owns one ephemeral secp256k1 keypair and, once the peer's public
key has been supplied, the symmetric key derived from the ECDH shared
secret. Sessions move from NOT_READY to READY exactly once; cipher
operations are only available in the READY state.
"""

import logging
from enum import Enum, auto
from typing import Optional, Tuple

from .cipher import AuthenticatedCipher
from .primitives import (
    RandomSource,
    generate_keypair,
    agree,
    derive_key,
    AlreadyInitialized,
    InvalidPeerKey,
    SessionNotReady,
)


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a session; the transition is one-way."""

    NOT_READY = auto()
    READY = auto()


class Session:
    """
    One side of a point-to-point encrypted channel.

    Usage:
        alice, bob = Session(), Session()
        alice.establish(bob.public_key)
        bob.establish(alice.public_key)
        bob.decrypt(alice.encrypt(b"Hello"))

    Only ``public_key`` is meant to leave the session. A session must be
    driven by a single owner at a time; its scratch state is not locked.
    """

    def __init__(self, rng: Optional[RandomSource] = None):
        """
        Initialize a session with a fresh ephemeral keypair.

        Args:
            rng: Source of random bytes for key generation, defaults to os.urandom
        """
        if rng is None:
            self._private_key, self._public_key = generate_keypair()
        else:
            self._private_key, self._public_key = generate_keypair(rng)

        self.state = SessionState.NOT_READY
        self._cipher: Optional[AuthenticatedCipher] = None

    @property
    def public_key(self) -> bytes:
        """SEC1 compressed encoding of our public key"""
        return self._public_key

    @property
    def public_key_hex(self) -> str:
        return self._public_key.hex()

    @property
    def is_ready(self) -> bool:
        return self.state is SessionState.READY

    @property
    def symmetric_key(self) -> bytes:
        """The derived 32-byte key; only available once ready"""
        return self._require_cipher().key

    def establish(self, peer_public_key: bytes) -> None:
        """
        Derive the symmetric key from the peer's public key.

        Args:
            peer_public_key: Peer's SEC1 public key encoding

        Raises:
            AlreadyInitialized: If the session is already ready
            InvalidPeerKey: If the peer key is malformed; the session stays NOT_READY
        """
        if self.state is SessionState.READY:
            raise AlreadyInitialized("Session already ready")

        try:
            shared_secret = agree(self._private_key, peer_public_key)
        except InvalidPeerKey:
            logger.warning("Rejected peer public key", extra={"public_key": self.public_key_hex})
            raise

        self._cipher = AuthenticatedCipher(derive_key(shared_secret))
        self.state = SessionState.READY
        logger.info("Session ready", extra={"public_key": self.public_key_hex})

    def _require_cipher(self) -> AuthenticatedCipher:
        if self.state is not SessionState.READY or self._cipher is None:
            raise SessionNotReady("Session not ready")
        return self._cipher

    def mac(self, plaintext: bytes) -> bytes:
        """
        Compute the 24-byte tag of a message under the session key.

        Raises:
            SessionNotReady: If key agreement has not completed
        """
        return self._require_cipher().mac(plaintext)

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        Encrypt a message for the peer.

        Args:
            plaintext: Message to encrypt

        Returns:
            ciphertext + tag (24 bytes)

        Raises:
            SessionNotReady: If key agreement has not completed
        """
        return self._require_cipher().encrypt(plaintext)

    def decrypt(self, data: bytes) -> bytes:
        """
        Decrypt a message from the peer.

        Args:
            data: ciphertext + tag

        Returns:
            Decrypted plaintext

        Raises:
            SessionNotReady: If key agreement has not completed
            MalformedCiphertext: If data is shorter than the tag
            MacMismatch: If the message was tampered with or keys differ
        """
        return self._require_cipher().decrypt(data)


def create_session_pair(rng: Optional[RandomSource] = None) -> Tuple[Session, Session]:
    """
    Create two sessions and exchange their public keys in process.

    Args:
        rng: Source of random bytes shared by both sessions

    Returns:
        Tuple of (first, second), both READY with the same symmetric key
    """
    first = Session(rng)
    second = Session(rng)

    first.establish(second.public_key)
    second.establish(first.public_key)
    return first, second
