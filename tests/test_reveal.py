import sys
from pathlib import Path

import pytest

# Ensure project root on sys.path for direct execution.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dealroom import codec  # noqa: E402
from dealroom.accounts import LocalAccount  # noqa: E402
from dealroom.challenge import SessionParams  # noqa: E402
from dealroom.errors import AuthorizationError, FormatError, UserDeclinedError  # noqa: E402
from dealroom.models import DealRecord  # noqa: E402
from dealroom.reveal import DealViewer, FlowState, RevealFlow  # noqa: E402

CONTRACT = "0x5fbdb2315678afecb367f032d93f642f64180aa3"


def _session(clock, days=30):
    return SessionParams(
        contract_address=CONTRACT,
        chain_id=31337,
        start_timestamp=int(clock.now),
        duration_days=days,
        public_key="0x" + "ab" * 8,
    )


def _record(employees=None):
    return DealRecord(
        id="deal-1",
        company_name="Acme Corp",
        valuation=codec.encode(90000000),
        revenue=codec.encode(12500000),
        employees=employees if employees is not None else codec.encode(400),
        timestamp=100,
        buyer="0x1",
    )


class FlakyAccount:
    """Signs the first N requests, then raises the given error."""

    def __init__(self, error, ok=0):
        self.error = error
        self.ok = ok
        self.messages = []

    def get_connected_address(self):
        return "0x1"

    def sign_message(self, text):
        self.messages.append(text)
        if len(self.messages) > self.ok:
            raise self.error
        return b"sig"


def test_reveal_walks_states_and_signs_exact_challenge(clock):
    account = LocalAccount.generate()
    session = _session(clock)
    flow = RevealFlow(account, session, clock=clock)
    request = flow.reveal(codec.encode(1234.5))

    assert request.state == FlowState.revealed
    assert request.value == 1234.5
    assert request.history == [FlowState.idle, FlowState.awaiting_signature, FlowState.decrypting, FlowState.revealed]
    assert account.signed_messages == [session.challenge()]
    assert account.verify(session.challenge(), request.signature)
    assert flow.decrypting is False


def test_reveal_waits_configured_delay(clock):
    slept = []
    flow = RevealFlow(LocalAccount.generate(), _session(clock), delay=1.5, clock=clock, sleep=slept.append)
    assert flow.reveal(codec.encode(1)).revealed
    assert slept == [1.5]


def test_declined_signature_returns_to_idle(clock):
    flow = RevealFlow(LocalAccount.generate(declines=True), _session(clock), clock=clock)
    request = flow.reveal(codec.encode(1))
    assert request.state == FlowState.idle
    assert request.cancelled
    assert request.error is None
    assert request.value is None
    assert flow.decrypting is False


def test_bad_ciphertext_fails(clock):
    flow = RevealFlow(LocalAccount.generate(), _session(clock), clock=clock)
    request = flow.reveal("FHE-garbage!")
    assert request.state == FlowState.failed
    assert isinstance(request.error, FormatError)
    assert request.value is None
    assert flow.decrypting is False


def test_signing_provider_error_fails(clock):
    flow = RevealFlow(FlakyAccount(RuntimeError("wallet crashed")), _session(clock), clock=clock)
    request = flow.reveal(codec.encode(1))
    assert request.state == FlowState.failed
    assert request.history[-2] == FlowState.awaiting_signature


def test_disconnected_wallet_fails_before_signing(clock):
    account = LocalAccount.generate(connected=False)
    request = RevealFlow(account, _session(clock), clock=clock).reveal(codec.encode(1))
    assert request.state == FlowState.failed
    assert isinstance(request.error, AuthorizationError)
    assert account.signed_messages == []


def test_expired_session_fails_before_signing(clock):
    account = LocalAccount.generate()
    session = _session(clock, days=1)
    clock.advance(2 * 86400)
    request = RevealFlow(account, session, clock=clock).reveal(codec.encode(1))
    assert request.state == FlowState.failed
    assert isinstance(request.error, AuthorizationError)
    assert account.signed_messages == []


def test_reveal_financials_all_fields(clock):
    flow = RevealFlow(LocalAccount.generate(), _session(clock), clock=clock)
    result = flow.reveal_financials(_record())
    assert result.shown
    assert result.view.as_dict() == {"valuation": 90000000, "revenue": 12500000, "employees": 400}


def test_reveal_financials_withholds_partial_success(clock):
    flow = RevealFlow(LocalAccount.generate(), _session(clock), clock=clock)
    result = flow.reveal_financials(_record(employees="FHE-bm90LWEtbnVtYmVy"))
    assert not result.shown
    assert result.view is None
    assert result.requests["valuation"].revealed
    assert result.requests["revenue"].revealed
    assert result.requests["employees"].state == FlowState.failed


def test_reveal_financials_withholds_when_last_signature_declined(clock):
    account = FlakyAccount(UserDeclinedError("no"), ok=2)
    result = RevealFlow(account, _session(clock), clock=clock).reveal_financials(_record())
    assert not result.shown
    assert result.requests["employees"].cancelled
    assert len(account.messages) == 3


def test_viewer_reveal_conceal_and_close(clock):
    viewer = DealViewer(RevealFlow(LocalAccount.generate(), _session(clock), clock=clock))
    with pytest.raises(ValueError):
        viewer.reveal_all()
    viewer.open(_record())
    assert viewer.reveal_all() is True
    assert viewer.view.valuation == 90000000
    viewer.conceal()
    assert viewer.view is None
    assert viewer.reveal_all() is True
    viewer.close()
    assert viewer.selected is None and viewer.view is None


def test_viewer_keeps_nothing_on_partial_failure(clock):
    viewer = DealViewer(RevealFlow(LocalAccount.generate(), _session(clock), clock=clock))
    viewer.open(_record(employees="not-a-number"))
    assert viewer.reveal_all() is False
    assert viewer.view is None


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-vv", "-s", "--capture=no"]))
