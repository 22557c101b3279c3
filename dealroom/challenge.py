from __future__ import annotations

import secrets
from dataclasses import dataclass, field

SECONDS_PER_DAY = 86400
SESSION_KEY_HEX_CHARS = 2000


def build_challenge(
    public_key: str,
    contract_address: str,
    chain_id: int,
    start_timestamp: int,
    duration_days: int,
) -> str:
    """The exact text an account holder signs to authorize a reveal."""
    return (
        f"publickey:{public_key}\n"
        f"contractAddresses:{contract_address}\n"
        f"contractsChainId:{chain_id}\n"
        f"startTimestamp:{start_timestamp}\n"
        f"durationDays:{duration_days}"
    )


def generate_session_public_key() -> str:
    """Fresh 0x-prefixed hex token, one per client session."""
    return "0x" + secrets.token_hex(SESSION_KEY_HEX_CHARS // 2)


@dataclass(frozen=True)
class SessionParams:
    """Viewer session parameters, fixed at startup and handed to the reveal flow."""

    contract_address: str
    chain_id: int
    start_timestamp: int
    duration_days: int = 30
    public_key: str = field(default_factory=generate_session_public_key)

    @classmethod
    def start(cls, contract_address: str, chain_id: int, now: float, duration_days: int = 30) -> "SessionParams":
        return cls(
            contract_address=contract_address,
            chain_id=chain_id,
            start_timestamp=int(now),
            duration_days=duration_days,
        )

    @property
    def expires_at(self) -> int:
        return self.start_timestamp + self.duration_days * SECONDS_PER_DAY

    def is_active(self, now: float) -> bool:
        return self.start_timestamp <= now < self.expires_at

    def challenge(self) -> str:
        return build_challenge(
            self.public_key,
            self.contract_address,
            self.chain_id,
            self.start_timestamp,
            self.duration_days,
        )
