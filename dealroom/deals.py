from __future__ import annotations

import secrets
import string
import time
from typing import Callable, List, Mapping, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from . import codec
from .errors import (
    AuthorizationError,
    BackendUnavailableError,
    InvalidTransitionError,
    NotFoundError,
    TransactionError,
    ValidationError,
    describe_failure,
)
from .ledger import Commit
from .models import TERMINAL_STATUSES, DealDraft, DealRecord, DealStats, DealStatus
from .status import StatusBoard
from .store import RecordStore

log = structlog.get_logger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 7
_ID_ATTEMPTS = 5


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


def _parse_draft(data: Union[DealDraft, Mapping]) -> DealDraft:
    if isinstance(data, DealDraft):
        return data
    try:
        return DealDraft.model_validate(dict(data))
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise ValidationError(f"Invalid or missing fields: {', '.join(fields)}") from exc


class DealController:
    """Create, list and decide deals on top of a RecordStore."""

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], float] = time.time,
        status_board: Optional[StatusBoard] = None,
    ):
        self.store = store
        self.clock = clock
        self.status_board = status_board or StatusBoard(clock=clock)
        self.creating = False

    def _new_id(self, taken: List[str]) -> str:
        for _ in range(_ID_ATTEMPTS):
            suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
            candidate = f"{int(self.clock() * 1000)}-{suffix}"
            if candidate not in taken:
                return candidate
        raise TransactionError("Could not allocate a unique deal id")

    def create_deal(self, data: Union[DealDraft, Mapping], creator: Optional[str]) -> str:
        """
        Validate, encode and store a new pending deal owned by ``creator``.
        The record is written before the index; if the index append fails the record
        stays orphaned (written but never listed) and is not rolled back.
        """
        if self.creating:
            raise TransactionError("A submission is already in progress")
        self.creating = True
        self.status_board.pending("Encrypting sensitive financial data...")
        try:
            if not creator:
                raise AuthorizationError("Please connect wallet first")
            draft = _parse_draft(data)
            encrypted = {
                "valuation": codec.encode(draft.valuation),
                "revenue": codec.encode(draft.revenue),
                "employees": codec.encode(draft.employees),
            }
            record = DealRecord(
                id=self._new_id(self.store.list_record_ids()),
                company_name=draft.company_name,
                timestamp=int(self.clock()),
                buyer=creator,
                status=DealStatus.pending,
                due_diligence=draft.due_diligence,
                **encrypted,
            )
            self.store.write_record(record)
            self.store.append_to_index(record.id)
        except Exception as exc:
            log.warning("deal.create_failed", error=str(exc), error_type=type(exc).__name__)
            self.status_board.error(describe_failure("Submission", exc))
            raise
        finally:
            self.creating = False
        log.info("deal.created", deal_id=record.id, buyer=creator)
        self.status_board.success("Encrypted M&A data submitted securely!")
        return record.id

    def _check_transition(self, record_id: str, target: DealStatus, requester: Optional[str]) -> DealRecord:
        if not self.store.is_backend_ready():
            raise BackendUnavailableError("Ledger is not available")
        record = self.store.read_record(record_id)
        if record is None:
            raise NotFoundError(f"Merger {record_id} not found")
        if record.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(f"Merger {record_id} is already {record.status.value}")
        if not requester:
            raise AuthorizationError("Please connect wallet first")
        if not same_address(requester, record.buyer):
            raise AuthorizationError(f"Only the buyer {record.buyer} may decide merger {record_id}")
        return record

    def set_status(self, record_id: str, new_status: Union[DealStatus, str], requester: Optional[str]) -> Commit:
        """Move a pending deal to approved or rejected. Read-modify-write of the whole record."""
        try:
            target = DealStatus(new_status)
        except ValueError:
            target = None
        verb = {DealStatus.approved: "Approval", DealStatus.rejected: "Rejection"}.get(target, "Status change")
        self.status_board.pending("Processing encrypted financial data...")
        try:
            if target is None or target == DealStatus.pending:
                raise InvalidTransitionError(f"Cannot move a merger to {new_status!r}")
            record = self._check_transition(record_id, target, requester)
            commit = self.store.write_record(record.with_status(target))
        except Exception as exc:
            log.warning("deal.status_failed", deal_id=record_id, target=str(new_status), error=str(exc))
            self.status_board.error(describe_failure(verb, exc))
            raise
        log.info("deal.status_changed", deal_id=record_id, status=target.value, tx_hash=commit.tx_hash)
        self.status_board.success(f"Merger {target.value} successfully!")
        return commit

    def approve(self, record_id: str, requester: Optional[str]) -> Commit:
        return self.set_status(record_id, DealStatus.approved, requester)

    def reject(self, record_id: str, requester: Optional[str]) -> Commit:
        return self.set_status(record_id, DealStatus.rejected, requester)

    def list_deals(self, filter: str = "") -> List[DealRecord]:
        """All readable deals, optionally filtered on name/notes, newest first."""
        records = []
        for record_id in self.store.list_record_ids():
            record = self.store.read_record(record_id)
            if record is not None:
                records.append(record)
        if filter:
            records = [r for r in records if r.matches(filter)]
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records

    def get_deal(self, record_id: str) -> DealRecord:
        record = self.store.read_record(record_id)
        if record is None:
            raise NotFoundError(f"Merger {record_id} not found")
        return record

    def stats(self) -> DealStats:
        records = self.list_deals()
        return DealStats(
            total=len(records),
            pending=sum(1 for r in records if r.status == DealStatus.pending),
            approved=sum(1 for r in records if r.status == DealStatus.approved),
            rejected=sum(1 for r in records if r.status == DealStatus.rejected),
        )

    @staticmethod
    def can_decide(record: DealRecord, identity: Optional[str]) -> bool:
        return record.status == DealStatus.pending and same_address(identity, record.buyer)
