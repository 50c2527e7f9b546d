"""
Cryptographic Primitives for the xc220b3 Secure Channel

This module provides the foundational operations used by a session:
ephemeral secp256k1 key generation, ECDH key agreement, BLAKE3 key
derivation and the error types shared by the rest of the package.
"""

import os
import hmac
import logging
from typing import Callable, Tuple

from blake3 import blake3
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec


logger = logging.getLogger(__name__)

# Callable returning the requested number of cryptographically secure bytes
RandomSource = Callable[[int], bytes]

CURVE = ec.SECP256K1()
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SCALAR_SIZE = 32
SYMMETRIC_KEY_SIZE = 32

# Upper bound on rejection-sampling rounds
MAX_SCALAR_ATTEMPTS = 64


class CryptoError(Exception):
    """Base exception for cryptographic errors"""
    pass


class InvalidPeerKey(CryptoError):
    """The peer's public key encoding is not a valid secp256k1 point"""
    pass


class SessionNotReady(CryptoError):
    """A cipher operation was invoked before key agreement completed"""
    pass


class AlreadyInitialized(CryptoError):
    """Key agreement was invoked a second time on the same session"""
    pass


class MalformedCiphertext(CryptoError):
    """Ciphertext is shorter than the authentication tag"""
    pass


class MacMismatch(CryptoError):
    """Recomputed tag does not match the tag carried by the ciphertext"""
    pass


class RandomSourceError(CryptoError):
    """The randomness source failed to supply key material"""
    pass


def _read_random(rng: RandomSource, size: int) -> bytes:
    try:
        data = rng(size)
    except Exception as e:
        raise RandomSourceError(f"Randomness source failed: {e}") from e

    if not isinstance(data, (bytes, bytearray)) or len(data) != size:
        raise RandomSourceError(f"Randomness source must return {size} bytes")
    return bytes(data)


def generate_keypair(rng: RandomSource = os.urandom) -> Tuple[ec.EllipticCurvePrivateKey, bytes]:
    """
    Generate an ephemeral secp256k1 keypair for key agreement.

    The private scalar is drawn from ``rng`` by rejection sampling, so a
    deterministic source yields a deterministic keypair.

    Args:
        rng: Source of cryptographically secure random bytes

    Returns:
        Tuple of (private_key, SEC1 compressed public key encoding)

    Raises:
        RandomSourceError: If the source fails or never yields a valid scalar
    """
    for _ in range(MAX_SCALAR_ATTEMPTS):
        candidate = int.from_bytes(_read_random(rng, SCALAR_SIZE), "big")
        if 0 < candidate < CURVE_ORDER:
            private_key = ec.derive_private_key(candidate, CURVE)
            public_bytes = serialize_public_key(private_key.public_key())
            logger.debug("Generated ephemeral keypair", extra={"public_key": public_bytes.hex()})
            return private_key, public_bytes

    raise RandomSourceError("Randomness source did not produce a valid secp256k1 scalar")


def agree(private_key: ec.EllipticCurvePrivateKey, peer_public: bytes) -> bytes:
    """
    Perform ECDH key agreement with a peer's encoded public key.

    Args:
        private_key: Our private key
        peer_public: Peer's SEC1 public key encoding

    Returns:
        32-byte shared secret (x coordinate of the shared point)

    Raises:
        InvalidPeerKey: If the encoding is malformed or not on the curve
    """
    peer_key = deserialize_public_key(peer_public)
    return private_key.exchange(ec.ECDH(), peer_key)


def derive_key(shared_secret: bytes) -> bytes:
    """
    Collapse a shared secret into a 32-byte symmetric key.

    Args:
        shared_secret: Raw ECDH output

    Returns:
        32-byte BLAKE3 digest of the shared secret
    """
    return blake3(shared_secret).digest(length=SYMMETRIC_KEY_SIZE)


def serialize_public_key(public_key: ec.EllipticCurvePublicKey, compressed: bool = True) -> bytes:
    """Serialize a secp256k1 public key to its SEC1 octet string"""
    point_format = (
        serialization.PublicFormat.CompressedPoint
        if compressed
        else serialization.PublicFormat.UncompressedPoint
    )
    return public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=point_format
    )


def deserialize_public_key(key_bytes: bytes) -> ec.EllipticCurvePublicKey:
    """
    Deserialize a SEC1 octet string to a secp256k1 public key.

    Both compressed (33 byte) and uncompressed (65 byte) forms are accepted.

    Raises:
        InvalidPeerKey: If the bytes do not decode to a point on the curve
    """
    if not isinstance(key_bytes, (bytes, bytearray)) or not key_bytes:
        raise InvalidPeerKey("Public key encoding must be non-empty bytes")

    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, bytes(key_bytes))
    except (ValueError, TypeError) as e:
        raise InvalidPeerKey(f"Invalid secp256k1 public key: {e}") from e


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison to prevent timing attacks.

    Args:
        a: First byte string
        b: Second byte string

    Returns:
        True if equal, False otherwise
    """
    return hmac.compare_digest(a, b)
