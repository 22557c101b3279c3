from typing import Optional, Protocol

from cryptography.hazmat.primitives.asymmetric import ed25519

from . import crypto
from .errors import UserDeclinedError


class Account(Protocol):
    def get_connected_address(self) -> Optional[str]: ...

    def sign_message(self, text: str) -> bytes: ...


class LocalAccount:
    """
    Ed25519 signing account held in process.
    ``declines=True`` models a holder who refuses every signature request.
    ``connected=False`` models a wallet that is not connected.
    """

    def __init__(
        self,
        private_key: ed25519.Ed25519PrivateKey,
        name: str = "account",
        declines: bool = False,
        connected: bool = True,
    ):
        self.name = name
        self._private_key = private_key
        self.declines = declines
        self.connected = connected
        self.signed_messages: list[str] = []

    @classmethod
    def generate(cls, name: str = "account", **kwargs) -> "LocalAccount":
        return cls(crypto.generate_signing_key(), name=name, **kwargs)

    @classmethod
    def from_pem(cls, pem: bytes, name: str = "account", **kwargs) -> "LocalAccount":
        return cls(crypto.load_signing_private_key(pem), name=name, **kwargs)

    @property
    def public_key(self) -> ed25519.Ed25519PublicKey:
        return self._private_key.public_key()

    @property
    def address(self) -> str:
        return crypto.address_from_public_key(self.public_key)

    def get_connected_address(self) -> Optional[str]:
        return self.address if self.connected else None

    def sign_message(self, text: str) -> bytes:
        if self.declines:
            raise UserDeclinedError(f"{self.name} declined to sign")
        self.signed_messages.append(text)
        return crypto.sign(self._private_key, text.encode("utf-8"))

    def verify(self, text: str, signature: bytes) -> bool:
        return crypto.verify(self.public_key, text.encode("utf-8"), signature)

    def private_pem(self) -> bytes:
        return crypto.private_key_pem(self._private_key)

    def public_pem(self) -> bytes:
        return crypto.public_key_pem(self.public_key)
