"""
Signature-gated reveal of ciphertext fields.

Each request walks IDLE -> AWAITING_SIGNATURE -> DECRYPTING -> REVEALED. Any error moves
it to FAILED; a holder who declines to sign sends it back to IDLE, which is a cancel,
not a failure. The signature only gates the reveal; decoding does not consume it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

import structlog

from . import codec
from .accounts import Account
from .challenge import SessionParams
from .errors import AuthorizationError, UserDeclinedError
from .models import DealRecord

log = structlog.get_logger(__name__)

FINANCIAL_FIELDS = ("valuation", "revenue", "employees")


class FlowState(str, Enum):
    idle = "idle"
    awaiting_signature = "awaiting_signature"
    decrypting = "decrypting"
    revealed = "revealed"
    failed = "failed"


@dataclass
class DecryptionRequest:
    ciphertext: str
    state: FlowState = FlowState.idle
    value: Optional[codec.Number] = None
    signature: Optional[bytes] = None
    error: Optional[Exception] = None
    history: List[FlowState] = field(default_factory=lambda: [FlowState.idle])

    def move(self, state: FlowState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def revealed(self) -> bool:
        return self.state == FlowState.revealed

    @property
    def cancelled(self) -> bool:
        return self.state == FlowState.idle and self.error is None and len(self.history) > 1


@dataclass
class DecryptedView:
    valuation: codec.Number
    revenue: codec.Number
    employees: codec.Number

    def as_dict(self) -> Dict[str, codec.Number]:
        return {"valuation": self.valuation, "revenue": self.revenue, "employees": self.employees}


@dataclass
class FinancialsReveal:
    record_id: str
    requests: Dict[str, DecryptionRequest]
    view: Optional[DecryptedView] = None

    @property
    def shown(self) -> bool:
        return self.view is not None


class RevealFlow:
    def __init__(
        self,
        account: Account,
        session: SessionParams,
        delay: float = 0.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.account = account
        self.session = session
        self.delay = delay
        self.clock = clock
        self.sleep = sleep
        self.decrypting = False

    def reveal(self, ciphertext: str) -> DecryptionRequest:
        """Run one request to completion and return it in its final state."""
        request = DecryptionRequest(ciphertext=ciphertext)
        self.decrypting = True
        try:
            if self.account.get_connected_address() is None:
                raise AuthorizationError("Please connect wallet first")
            if not self.session.is_active(self.clock()):
                raise AuthorizationError("Viewing session has expired")
            request.move(FlowState.awaiting_signature)
            try:
                request.signature = self.account.sign_message(self.session.challenge())
            except UserDeclinedError:
                log.info("reveal.declined")
                request.move(FlowState.idle)
                return request
            request.move(FlowState.decrypting)
            if self.delay:
                self.sleep(self.delay)
            request.value = codec.decode(ciphertext)
            request.move(FlowState.revealed)
        except Exception as exc:  # pylint: disable=broad-except
            # Signing providers are external; whatever they raise ends the request as failed.
            request.error = exc
            request.move(FlowState.failed)
            log.error("reveal.failed", error=str(exc), error_type=type(exc).__name__)
        finally:
            self.decrypting = False
        return request

    def reveal_financials(self, record: DealRecord) -> FinancialsReveal:
        """Reveal all three financial fields, or none of them."""
        requests = {name: self.reveal(getattr(record, name)) for name in FINANCIAL_FIELDS}
        result = FinancialsReveal(record_id=record.id, requests=requests)
        if all(r.revealed for r in requests.values()):
            result.view = DecryptedView(**{name: r.value for name, r in requests.items()})
        else:
            log.info(
                "reveal.financials_withheld",
                record_id=record.id,
                states={name: r.state.value for name, r in requests.items()},
            )
        return result


class DealViewer:
    """Holds the currently inspected deal and whatever has been revealed for it."""

    def __init__(self, flow: RevealFlow):
        self.flow = flow
        self.selected: Optional[DealRecord] = None
        self.view: Optional[DecryptedView] = None

    def open(self, record: DealRecord) -> None:
        self.selected = record
        self.view = None

    def reveal_all(self) -> bool:
        if self.selected is None:
            raise ValueError("No deal selected")
        result = self.flow.reveal_financials(self.selected)
        if result.shown:
            self.view = result.view
        return result.shown

    def conceal(self) -> None:
        self.view = None

    def close(self) -> None:
        self.selected = None
        self.view = None
