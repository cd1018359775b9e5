"""Types for the aggregated safety verdict."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.parsers.records import ChainRecord, ReputationRecord


class RiskLevel(str, Enum):
    """Verdict category, derived only from ``safety_score``."""

    SAFE = "SAFE"  # 80-100
    LOW_RISK = "LOW_RISK"  # 60-79
    MEDIUM_RISK = "MEDIUM_RISK"  # 40-59
    HIGH_RISK = "HIGH_RISK"  # 20-39
    CRITICAL = "CRITICAL"  # 0-19


class RiskBucket(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class VerdictMetadata:
    tax_risk: RiskBucket
    centralization_risk: RiskBucket
    technical_risk: RiskBucket
    red_flags_count: int
    passed_basic_checks: bool


@dataclass(frozen=True)
class SafetyVerdict:
    """Unified assessment. ``safety_score``: 0 dangerous .. 100 safe."""

    safety_score: int
    risk_level: RiskLevel
    is_honeypot: bool
    confidence: float  # 0.0 - 1.0
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    sources_checked: list[str] = field(default_factory=list)
    metadata: VerdictMetadata | None = None


@dataclass(frozen=True)
class SafetyCheckResult:
    """Everything one check produced, ready for the API layer."""

    token_address: str
    chain_id: int
    chain_name: str
    verdict: SafetyVerdict
    reputation: ReputationRecord
    chain: ChainRecord
    checked_at: datetime

    def details(self) -> dict[str, Any]:
        return {
            "reputation": self.reputation.to_dict(),
            "chain": self.chain.to_dict(),
        }
