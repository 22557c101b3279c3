import sys
from pathlib import Path

import pytest

# Ensure project root on sys.path for direct execution.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dealroom.challenge import SECONDS_PER_DAY, SessionParams, build_challenge, generate_session_public_key  # noqa: E402

CONTRACT = "0x5fbdb2315678afecb367f032d93f642f64180aa3"


def test_challenge_text_is_exact():
    message = build_challenge("0xabc", CONTRACT, 11155111, 1700000000, 30)
    assert message == (
        "publickey:0xabc\n"
        f"contractAddresses:{CONTRACT}\n"
        "contractsChainId:11155111\n"
        "startTimestamp:1700000000\n"
        "durationDays:30"
    )


def test_challenge_is_deterministic():
    args = ("0xdeadbeef", CONTRACT, 1, 1234, 7)
    assert build_challenge(*args) == build_challenge(*args)
    assert build_challenge(*args) != build_challenge("0xdeadbeef", CONTRACT, 1, 1235, 7)


def test_session_public_key_shape_and_uniqueness():
    key = generate_session_public_key()
    assert key.startswith("0x")
    assert len(key) == 2 + 2000
    int(key[2:], 16)
    assert generate_session_public_key() != key


def test_session_params_builds_same_challenge():
    session = SessionParams(contract_address=CONTRACT, chain_id=31337, start_timestamp=100, duration_days=2, public_key="0x01")
    assert session.challenge() == build_challenge("0x01", CONTRACT, 31337, 100, 2)


def test_session_validity_window():
    session = SessionParams.start(CONTRACT, 31337, now=1000.7, duration_days=1)
    assert session.start_timestamp == 1000
    assert session.is_active(1000)
    assert session.is_active(1000 + SECONDS_PER_DAY - 1)
    assert not session.is_active(1000 + SECONDS_PER_DAY)
    assert not session.is_active(999)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-vv", "-s", "--capture=no"]))
