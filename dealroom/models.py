from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from . import codec
from .errors import FormatError


class DealStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


TERMINAL_STATUSES = frozenset({DealStatus.approved, DealStatus.rejected})


class DealDraft(BaseModel):
    """User input for a new deal, before encoding."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    company_name: str = Field(alias="companyName", min_length=1)
    valuation: Union[StrictInt, StrictFloat]
    revenue: Union[StrictInt, StrictFloat]
    employees: Union[StrictInt, StrictFloat]
    due_diligence: str = Field(default="", alias="dueDiligence")

    @field_validator("valuation", "revenue", "employees", mode="before")
    @classmethod
    def _finite_number(cls, value: Any) -> Any:
        # Integers pass through untouched so large values stay exact.
        if isinstance(value, bool):
            raise ValueError("must be a number, not a boolean")
        if isinstance(value, str):
            try:
                return codec.parse_number(value)
            except FormatError as exc:
                raise ValueError(str(exc)) from exc
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("must be finite")
        return value


class DealRecord(BaseModel):
    """A stored deal. Numeric fields hold ciphertext only."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    company_name: str = Field(alias="companyName")
    valuation: str
    revenue: str
    employees: str
    timestamp: int
    buyer: str
    status: DealStatus = DealStatus.pending
    due_diligence: str = Field(default="", alias="dueDiligence")

    def to_json(self) -> bytes:
        """Serialize to the ledger's UTF-8 JSON blob. The id lives in the key, not the blob."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"id"})
        return json.dumps(data).encode("utf-8")

    @classmethod
    def from_json(cls, record_id: str, blob: bytes) -> "DealRecord":
        try:
            data = json.loads(blob.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FormatError(f"Record {record_id} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise FormatError(f"Record {record_id} is not a JSON object")
        # Older writers omitted these; absent or null means the default.
        if data.get("status") is None:
            data.pop("status", None)
        if data.get("dueDiligence") is None:
            data.pop("dueDiligence", None)
        data["id"] = record_id
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise FormatError(f"Record {record_id} has invalid fields: {exc}") from exc

    def with_status(self, status: DealStatus) -> "DealRecord":
        return self.model_copy(update={"status": status})

    def matches(self, term: str) -> bool:
        needle = term.lower()
        return needle in self.company_name.lower() or needle in self.due_diligence.lower()


@dataclass(frozen=True)
class DealStats:
    total: int
    pending: int
    approved: int
    rejected: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "pending": self.pending,
            "approved": self.approved,
            "rejected": self.rejected,
        }
