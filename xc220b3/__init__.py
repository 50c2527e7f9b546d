"""
xc220b3 secure channel.

Ephemeral secp256k1 ECDH key agreement, BLAKE3 key derivation and
XChaCha20 encryption with the BLAKE3 message tag used as the nonce.
"""

from .primitives import (
    generate_keypair,
    agree,
    derive_key,
    CryptoError,
    InvalidPeerKey,
    SessionNotReady,
    AlreadyInitialized,
    MalformedCiphertext,
    MacMismatch,
    RandomSourceError,
)
from .cipher import AuthenticatedCipher, TAG_SIZE, KEY_SIZE
from .session import Session, SessionState, create_session_pair

__all__ = [
    'generate_keypair',
    'agree',
    'derive_key',
    'AuthenticatedCipher',
    'Session',
    'SessionState',
    'create_session_pair',
    'TAG_SIZE',
    'KEY_SIZE',
    'CryptoError',
    'InvalidPeerKey',
    'SessionNotReady',
    'AlreadyInitialized',
    'MalformedCiphertext',
    'MacMismatch',
    'RandomSourceError',
]
