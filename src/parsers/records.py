"""Risk records produced by the data sources.

A record is always fully populated. A failed source still returns a record,
tagged ``RecordStatus.ERRORED`` with neutral defaults, so the scorer can
treat success and failure uniformly as data.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

NEUTRAL_RISK_SCORE = 50


class RecordStatus(str, Enum):
    OK = "ok"
    ERRORED = "errored"


@dataclass(kw_only=True)
class RiskRecord:
    """Fields shared by every source. ``risk_score``: 0 safe .. 100 dangerous."""

    source: str
    status: RecordStatus = RecordStatus.OK
    risk_score: int = NEUTRAL_RISK_SCORE
    is_honeypot: bool | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is RecordStatus.OK

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(kw_only=True)
class ReputationRecord(RiskRecord):
    """Normalized honeypot.is result."""

    source: str = "reputation"
    risk_label: str = "unknown"
    buy_tax: float | None = None  # percentage (0-100)
    sell_tax: float | None = None  # percentage (0-100)
    transfer_tax: float | None = None  # percentage (0-100)
    buy_gas_used: int | None = None
    sell_gas_used: int | None = None
    holder_count: int | None = None
    top_10_holders_percent: float | None = None
    contract_verified: bool | None = None
    is_proxy: bool | None = None
    honeypot_reason: str = ""
    token_name: str | None = None
    token_symbol: str | None = None
    liquidity_usd: float | None = None
    liquidity_locked: bool | None = None
    created_at: str | None = None

    @classmethod
    def failed(cls, error: str) -> ReputationRecord:
        return cls(status=RecordStatus.ERRORED, error=error)


@dataclass
class ContractChecks:
    """ERC20 interface probes for a deployed contract."""

    has_name: bool = False
    has_symbol: bool = False
    valid_decimals: bool = False
    has_supply: bool = False
    has_balance_of: bool = False
    reasonable_code_size: bool = True

    def failed_count(self) -> int:
        return sum(1 for passed in asdict(self).values() if not passed)


@dataclass(kw_only=True)
class ChainRecord(RiskRecord):
    """On-chain view of the token contract. Never sets ``is_honeypot``."""

    source: str = "chain"
    is_contract: bool | None = None
    has_code: bool | None = None
    code_size: int | None = None  # bytes
    is_erc20: bool | None = None
    name: str | None = None
    symbol: str | None = None
    decimals: int | None = None
    total_supply: int | None = None
    checks: ContractChecks | None = field(default=None)
    is_pausable: bool | None = None
    is_mintable: bool | None = None

    @classmethod
    def failed(cls, error: str) -> ChainRecord:
        return cls(status=RecordStatus.ERRORED, error=error)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        # uint256 supplies overflow JSON numbers in most clients
        if self.total_supply is not None:
            data["total_supply"] = str(self.total_supply)
        return data
