"""Transient operation banners that clear themselves after a fixed interval."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

SUCCESS_CLEAR_SECONDS = 2.0
ERROR_CLEAR_SECONDS = 3.0


@dataclass(frozen=True)
class StatusBanner:
    status: str  # "pending" | "success" | "error"
    message: str
    shown_at: float
    clear_at: Optional[float] = None


class StatusBoard:
    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._banner: Optional[StatusBanner] = None
        self.history: List[StatusBanner] = []

    def _show(self, status: str, message: str, clear_after: Optional[float]) -> StatusBanner:
        now = self.clock()
        banner = StatusBanner(
            status=status,
            message=message,
            shown_at=now,
            clear_at=None if clear_after is None else now + clear_after,
        )
        self._banner = banner
        self.history.append(banner)
        return banner

    def pending(self, message: str) -> StatusBanner:
        return self._show("pending", message, None)

    def success(self, message: str) -> StatusBanner:
        return self._show("success", message, SUCCESS_CLEAR_SECONDS)

    def error(self, message: str) -> StatusBanner:
        return self._show("error", message, ERROR_CLEAR_SECONDS)

    def current(self) -> Optional[StatusBanner]:
        """The visible banner, or None once its clear time has passed."""
        banner = self._banner
        if banner is None:
            return None
        if banner.clear_at is not None and self.clock() >= banner.clear_at:
            self._banner = None
            return None
        return banner
