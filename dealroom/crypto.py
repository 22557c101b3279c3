import base64
import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519


def b64e(data: bytes) -> str:
    """URL-safe base64 encoding without newlines."""
    return base64.urlsafe_b64encode(data).decode("ascii")


def b64d(data: str) -> bytes:
    """URL-safe base64 decoding from string."""
    return base64.urlsafe_b64decode(data.encode("ascii"))


def generate_signing_key() -> ed25519.Ed25519PrivateKey:
    return ed25519.Ed25519PrivateKey.generate()


def private_key_pem(priv: ed25519.Ed25519PrivateKey) -> bytes:
    return priv.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_key_pem(pub: ed25519.Ed25519PublicKey) -> bytes:
    return pub.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def load_signing_private_key(pem: bytes) -> ed25519.Ed25519PrivateKey:
    return serialization.load_pem_private_key(pem, password=None)


def address_from_public_key(pub: ed25519.Ed25519PublicKey) -> str:
    """0x + last 20 bytes of SHA-256 over the raw public key."""
    raw = pub.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return "0x" + hashlib.sha256(raw).digest()[-20:].hex()


def sign(priv: ed25519.Ed25519PrivateKey, message: bytes) -> bytes:
    """Sign a message with Ed25519."""
    return priv.sign(message)


def verify(pub: ed25519.Ed25519PublicKey, message: bytes, signature: bytes) -> bool:
    """Verify a signature. Returns True when valid, False otherwise."""
    try:
        pub.verify(signature, message)
        return True
    except InvalidSignature:
        return False
