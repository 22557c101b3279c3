"""Ledger collaborators: the key/value contract surface plus an in-memory fake and an HTTP client."""

from __future__ import annotations

import base64
import binascii
import hashlib
import itertools
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

import requests

from .errors import BackendUnavailableError, FormatError, TransactionError

DEFAULT_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"


@dataclass(frozen=True)
class Commit:
    """Receipt for an accepted ledger write."""

    key: str
    tx_hash: str


class KeyValueStore(Protocol):
    def is_available(self) -> bool: ...

    def get_address(self) -> str: ...

    def get_data(self, key: str) -> bytes: ...

    def set_data(self, key: str, value: bytes) -> Commit: ...


def _tx_hash(key: str, value: bytes, nonce: int) -> str:
    return "0x" + hashlib.sha256(key.encode("utf-8") + value + nonce.to_bytes(8, "big")).hexdigest()


class InMemoryLedger:
    """
    Dict-backed ledger used for tests and offline runs.
    Last write wins per key, exactly like the contract it stands in for.
    """

    def __init__(self, address: str = DEFAULT_ADDRESS) -> None:
        self.address = address
        self.available = True
        self.data: Dict[str, bytes] = {}
        self.write_count = 0
        self.read_count = 0
        self._nonce = itertools.count(1)
        self._reject_reason: Optional[str] = None
        self.after_read: Optional[Callable[[str, bytes], None]] = None

    def is_available(self) -> bool:
        return self.available

    def get_address(self) -> str:
        return self.address

    def get_data(self, key: str) -> bytes:
        self.read_count += 1
        value = self.data.get(key, b"")
        hook = self.after_read
        if hook is not None:
            # Runs after the value is captured, so the caller sees the pre-hook snapshot.
            hook(key, value)
        return value

    def set_data(self, key: str, value: bytes) -> Commit:
        if self._reject_reason is not None:
            reason, self._reject_reason = self._reject_reason, None
            raise TransactionError.from_reason(reason)
        self.data[key] = bytes(value)
        self.write_count += 1
        return Commit(key=key, tx_hash=_tx_hash(key, value, next(self._nonce)))

    def reject_next_write(self, reason: str = "user rejected transaction") -> None:
        self._reject_reason = reason


class HttpLedger:
    """Client for the reference ledger service (see ``app.main``)."""

    def __init__(self, base_url: str, timeout: float = 5, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @staticmethod
    def _json(res, error_cls, what: str) -> dict:
        try:
            body = res.json()
        except ValueError as exc:
            raise error_cls(f"{what}: response is not JSON") from exc
        if not isinstance(body, dict):
            raise error_cls(f"{what}: response is not a JSON object")
        return body

    def _status(self) -> dict:
        try:
            res = self.session.get(f"{self.base_url}/status", timeout=self.timeout)
        except requests.RequestException as exc:
            raise BackendUnavailableError(f"Ledger unreachable: {exc}") from exc
        if res.status_code != 200:
            raise BackendUnavailableError(f"Ledger status failed: {res.text}")
        return self._json(res, BackendUnavailableError, "Ledger status")

    def is_available(self) -> bool:
        try:
            return bool(self._status().get("available"))
        except BackendUnavailableError:
            return False

    def get_address(self) -> str:
        address = self._status().get("address")
        if not isinstance(address, str):
            raise BackendUnavailableError("Ledger status carries no address")
        return address

    def get_data(self, key: str) -> bytes:
        try:
            res = self.session.get(f"{self.base_url}/data/{key}", timeout=self.timeout)
        except requests.RequestException as exc:
            raise BackendUnavailableError(f"Ledger unreachable: {exc}") from exc
        if res.status_code != 200:
            raise BackendUnavailableError(f"Could not read {key}: {res.text}")
        value = self._json(res, BackendUnavailableError, f"Could not read {key}").get("value") or ""
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, TypeError, ValueError) as exc:
            raise FormatError(f"Value under {key} is not valid base64") from exc

    def set_data(self, key: str, value: bytes) -> Commit:
        payload = {"value": base64.b64encode(value).decode("ascii")}
        try:
            res = self.session.put(f"{self.base_url}/data/{key}", json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransactionError(f"Ledger write failed: {exc}") from exc
        if res.status_code != 200:
            raise TransactionError.from_reason(f"Ledger rejected write to {key}: {res.text}")
        tx_hash = self._json(res, TransactionError, f"Write to {key}").get("tx_hash")
        if not isinstance(tx_hash, str):
            raise TransactionError(f"Write to {key}: no transaction hash in response")
        return Commit(key=key, tx_hash=tx_hash)
