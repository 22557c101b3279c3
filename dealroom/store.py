"""
Record protocol over a flat key/value ledger.

Records live under ``merger_<id>``; the list of ids lives as a JSON array under
``merger_keys``. The ledger has no multi-key transactions, so the index update is a
plain read-modify-write: two appenders that read the same index snapshot race, and the
later write drops the earlier id. The record blob of the dropped id stays behind,
unreachable by listing. Nothing here repairs that.
"""

from __future__ import annotations

import json
from typing import List, Optional

import structlog

from .errors import BackendUnavailableError, FormatError
from .ledger import Commit, KeyValueStore
from .models import DealRecord

INDEX_KEY = "merger_keys"
RECORD_PREFIX = "merger_"

log = structlog.get_logger(__name__)


def record_key(record_id: str) -> str:
    return f"{RECORD_PREFIX}{record_id}"


def _parse_index(blob: bytes) -> List[str]:
    try:
        text = blob.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Index is not UTF-8: {exc}") from exc
    if not text.strip():
        return []
    try:
        ids = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Index is not valid JSON: {exc}") from exc
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise FormatError("Index is not a JSON array of strings")
    return ids


class RecordStore:
    def __init__(self, ledger: KeyValueStore):
        self.ledger = ledger

    def is_backend_ready(self) -> bool:
        return self.ledger.is_available()

    def _require_backend(self) -> None:
        if not self.is_backend_ready():
            raise BackendUnavailableError("Ledger is not available")

    def _read_index(self) -> List[str]:
        blob = self.ledger.get_data(INDEX_KEY)
        if not blob:
            return []
        return _parse_index(blob)

    def list_record_ids(self) -> List[str]:
        """Ids in stored order. Any failure degrades to an empty list."""
        try:
            if not self.is_backend_ready():
                return []
            return self._read_index()
        except FormatError as exc:
            log.warning("index.parse_failed", key=INDEX_KEY, error=str(exc))
        except BackendUnavailableError as exc:
            log.warning("index.read_failed", key=INDEX_KEY, error=str(exc))
        return []

    def read_record(self, record_id: str) -> Optional[DealRecord]:
        """Return the record, or None when it is absent, unreadable or malformed."""
        try:
            if not self.is_backend_ready():
                return None
            blob = self.ledger.get_data(record_key(record_id))
        except (BackendUnavailableError, FormatError) as exc:
            log.warning("record.read_failed", record_id=record_id, error=str(exc))
            return None
        if not blob:
            return None
        try:
            return DealRecord.from_json(record_id, blob)
        except FormatError as exc:
            log.warning("record.parse_failed", record_id=record_id, error=str(exc))
            return None

    def write_record(self, record: DealRecord) -> Commit:
        """Overwrite the record blob. Does not touch the index."""
        self._require_backend()
        commit = self.ledger.set_data(record_key(record.id), record.to_json())
        log.debug("record.written", record_id=record.id, tx_hash=commit.tx_hash)
        return commit

    def append_to_index(self, record_id: str) -> Optional[Commit]:
        """
        Read the index, append ``record_id`` if missing and write it back.
        Returns None when the id was already listed. Not atomic with other appenders.
        """
        self._require_backend()
        try:
            ids = self._read_index()
        except FormatError as exc:
            # Same degradation as listing: an unreadable index is treated as empty.
            log.warning("index.parse_failed", key=INDEX_KEY, error=str(exc))
            ids = []
        if record_id in ids:
            return None
        ids.append(record_id)
        commit = self.ledger.set_data(INDEX_KEY, json.dumps(ids).encode("utf-8"))
        log.debug("index.appended", record_id=record_id, size=len(ids), tx_hash=commit.tx_hash)
        return commit
