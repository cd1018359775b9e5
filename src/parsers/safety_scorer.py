"""Safety scorer, combines reputation and on-chain risk into one verdict.

Weighted average of per-source safety (100 - risk):
- reputation (honeypot.is) 60%: scam simulation specialist
- chain (direct RPC) 40%: technical validation

Errored records are dropped from the average; with no usable source the
score falls back to a neutral 50. Everything here is pure: no I/O, no
clock, no shared state.
"""

import math

from loguru import logger

from src.parsers.records import ChainRecord, ReputationRecord
from src.parsers.safety_types import RiskBucket, RiskLevel, SafetyVerdict, VerdictMetadata

DEFAULT_REPUTATION_WEIGHT = 0.6
DEFAULT_CHAIN_WEIGHT = 0.4
NEUTRAL_SAFETY_SCORE = 50

# safety_score lower bounds, checked high to low
LEVEL_THRESHOLDS: list[tuple[int, RiskLevel]] = [
    (80, RiskLevel.SAFE),
    (60, RiskLevel.LOW_RISK),
    (40, RiskLevel.MEDIUM_RISK),
    (20, RiskLevel.HIGH_RISK),
]

# Tax tiers (percent)
TAX_LOW = 5.0
TAX_MEDIUM = 10.0
TAX_HIGH = 20.0
TAX_CRITICAL = 50.0

# Top-10 holder share tiers (percent)
HOLDERS_HIGH = 50.0
HOLDERS_VERY_HIGH = 75.0
HOLDERS_EXTREME = 90.0

SMALL_CODE_SIZE = 100
LARGE_CODE_SIZE = 50_000

# Marker carried by every critical-tier warning; counted as a red flag
RED_FLAG = "🚨"

HONEYPOT_RECOMMENDATIONS = (
    "🚫 DO NOT INTERACT - Confirmed honeypot scam",
    "❌ Do not buy, do not hold, report as scam",
)


def _safe_float(value: float | int | None, default: float = 0.0) -> float:
    return default if value is None else float(value)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def risk_level_for_score(safety_score: int) -> RiskLevel:
    for threshold, level in LEVEL_THRESHOLDS:
        if safety_score >= threshold:
            return level
    return RiskLevel.CRITICAL


def compute_safety_score(
    reputation: ReputationRecord,
    chain: ChainRecord,
    reputation_weight: float = DEFAULT_REPUTATION_WEIGHT,
    chain_weight: float = DEFAULT_CHAIN_WEIGHT,
) -> int:
    """Weighted mean of (100 - risk_score) over the records that are OK."""
    parts: list[tuple[int, float]] = []
    if reputation.ok:
        parts.append((100 - reputation.risk_score, reputation_weight))
    if chain.ok:
        parts.append((100 - chain.risk_score, chain_weight))

    if not parts:
        return NEUTRAL_SAFETY_SCORE

    total_weight = sum(w for _, w in parts)
    weighted = sum(s * w for s, w in parts)
    return max(0, min(100, _round_half_up(weighted / total_weight)))


def compute_confidence(reputation: ReputationRecord, chain: ChainRecord) -> float:
    """Heuristic 0.5..1.0 from source availability plus data richness.

    has_name/has_symbol are already implied by ``is_erc20`` and are counted
    again on purpose.
    """
    confidence = 0.5

    if reputation.ok and chain.ok:
        confidence += 0.30
    elif reputation.ok or chain.ok:
        confidence += 0.10

    if reputation.ok:
        if reputation.contract_verified:
            confidence += 0.10
        if (reputation.holder_count or 0) > 100:
            confidence += 0.05
        if (reputation.liquidity_usd or 0) > 10_000:
            confidence += 0.05

    if chain.ok and chain.is_erc20:
        confidence += 0.05
        if chain.checks and chain.checks.has_name:
            confidence += 0.025
        if chain.checks and chain.checks.has_symbol:
            confidence += 0.025

    return round(min(1.0, confidence), 3)


def _sell_tax_warning(sell_tax: float) -> str | None:
    if sell_tax > TAX_CRITICAL:
        return f"{RED_FLAG} CRITICAL sell tax: {sell_tax:.1f}% - Likely scam"
    if sell_tax > TAX_HIGH:
        return f"⚠️ Very high sell tax: {sell_tax:.1f}%"
    if sell_tax > TAX_MEDIUM:
        return f"⚠️ High sell tax: {sell_tax:.1f}%"
    if sell_tax > TAX_LOW:
        return f"ℹ️ Moderate sell tax: {sell_tax:.1f}%"
    return None


def _buy_tax_warning(buy_tax: float) -> str | None:
    if buy_tax > TAX_HIGH:
        return f"⚠️ Very high buy tax: {buy_tax:.1f}%"
    if buy_tax > TAX_MEDIUM:
        return f"⚠️ High buy tax: {buy_tax:.1f}%"
    if buy_tax > TAX_LOW:
        return f"ℹ️ Moderate buy tax: {buy_tax:.1f}%"
    return None


def _holders_warning(top10_pct: float) -> str | None:
    if top10_pct > HOLDERS_EXTREME:
        return f"{RED_FLAG} EXTREME centralization: Top 10 holders own {top10_pct:.1f}%"
    if top10_pct > HOLDERS_VERY_HIGH:
        return f"⚠️ Very high centralization: Top 10 holders own {top10_pct:.1f}%"
    if top10_pct > HOLDERS_HIGH:
        return f"⚠️ High centralization: Top 10 holders own {top10_pct:.1f}%"
    return None


def generate_warnings(reputation: ReputationRecord, chain: ChainRecord) -> list[str]:
    """Ordered warnings, one per triggered rule. Tier families are exclusive."""
    warnings: list[str] = []

    if reputation.is_honeypot is True:
        warnings.append(f"{RED_FLAG} HONEYPOT DETECTED - Cannot sell this token")
        if reputation.honeypot_reason:
            warnings.append(f"Reason: {reputation.honeypot_reason}")

    for warning in (
        _sell_tax_warning(_safe_float(reputation.sell_tax)),
        _buy_tax_warning(_safe_float(reputation.buy_tax)),
        _holders_warning(_safe_float(reputation.top_10_holders_percent)),
    ):
        if warning:
            warnings.append(warning)

    # Only an explicit "not open source" counts, missing data does not
    if reputation.contract_verified is False:
        warnings.append("⚠️ Contract source code not verified")
    if reputation.is_proxy is True:
        warnings.append("⚠️ Proxy contract - Implementation can be changed by owner")

    if chain.is_contract is False:
        warnings.append(f"{RED_FLAG} Not a smart contract - EOA addresses cannot be tokens")
    if chain.is_contract is True and chain.is_erc20 is False:
        warnings.append("⚠️ Does not implement standard ERC20 interface")

    if chain.code_size is not None:
        if chain.code_size < SMALL_CODE_SIZE:
            warnings.append("⚠️ Suspiciously small contract code")
        elif chain.code_size > LARGE_CODE_SIZE:
            warnings.append("⚠️ Unusually large contract - Possible obfuscation")

    return warnings


def generate_recommendations(
    safety_score: int, is_honeypot: bool, warnings: list[str]
) -> list[str]:
    """Fixed advice per score bracket; a confirmed honeypot overrides all."""
    if is_honeypot:
        return list(HONEYPOT_RECOMMENDATIONS)

    count = len(warnings)
    level = risk_level_for_score(safety_score)

    if level is RiskLevel.SAFE:
        recs = [
            "✅ Generally safe to interact",
            "✓ Token appears legitimate based on multiple checks",
            "📝 Always verify contract on blockchain explorer",
        ]
        if count:
            recs.append(f"⚠️ Note {count} minor warning(s) - Review them")
    elif level is RiskLevel.LOW_RISK:
        recs = [
            "⚠️ Exercise caution - Some concerns detected",
            "💡 Start with small test transaction (<$10)",
            "🔍 Check recent transactions on blockchain explorer",
            "📊 Verify liquidity and trading volume",
        ]
        if count:
            recs.append(f"⚠️ Review {count} warning(s) carefully")
    elif level is RiskLevel.MEDIUM_RISK:
        recs = [
            "⚠️ HIGH RISK - Proceed with extreme caution",
            "🛑 Only interact if you fully understand the risks",
            "💰 Never invest more than you can afford to lose",
            "🔍 Thoroughly research on multiple sources",
        ]
        if count:
            recs.append(f"🚨 {count} significant warning(s) found")
    elif level is RiskLevel.HIGH_RISK:
        recs = [
            "🚨 VERY HIGH RISK - Strongly advise avoiding",
            "❌ Multiple red flags detected",
            "🛑 High probability of scam or malfunction",
        ]
        if count:
            recs.append(f"🚨 Found {count} critical warning(s)")
        recs.append("💡 Consider safer alternatives")
    else:
        recs = [
            "🚫 CRITICAL RISK - DO NOT INTERACT",
            "❌ Severe issues detected across multiple checks",
            "🚨 Almost certainly a scam or broken token",
        ]
        if count:
            recs.append(f"⚠️ {count} critical issue(s) found")
        recs.append("🛡️ Protect your funds - avoid this token")

    return recs


def categorize_tax_risk(max_tax: float) -> RiskBucket:
    if max_tax == 0:
        return RiskBucket.NONE
    if max_tax <= TAX_LOW:
        return RiskBucket.LOW
    if max_tax <= TAX_MEDIUM:
        return RiskBucket.MEDIUM
    if max_tax <= TAX_HIGH:
        return RiskBucket.HIGH
    return RiskBucket.CRITICAL


def categorize_centralization_risk(top10_pct: float) -> RiskBucket:
    if top10_pct == 0:
        return RiskBucket.NONE
    if top10_pct <= 30:
        return RiskBucket.LOW
    if top10_pct <= 50:
        return RiskBucket.MEDIUM
    if top10_pct <= 75:
        return RiskBucket.HIGH
    return RiskBucket.CRITICAL


def categorize_technical_risk(chain: ChainRecord) -> RiskBucket:
    if chain.is_contract is False:
        return RiskBucket.CRITICAL
    if chain.is_erc20 is False:
        return RiskBucket.HIGH

    failed = chain.checks.failed_count() if chain.checks else 0
    if failed == 0:
        return RiskBucket.NONE
    if failed <= 1:
        return RiskBucket.LOW
    if failed <= 2:
        return RiskBucket.MEDIUM
    if failed <= 3:
        return RiskBucket.HIGH
    return RiskBucket.CRITICAL


def build_metadata(
    reputation: ReputationRecord, chain: ChainRecord, warnings: list[str]
) -> VerdictMetadata:
    max_tax = max(_safe_float(reputation.buy_tax), _safe_float(reputation.sell_tax))
    return VerdictMetadata(
        tax_risk=categorize_tax_risk(max_tax),
        centralization_risk=categorize_centralization_risk(
            _safe_float(reputation.top_10_holders_percent)
        ),
        technical_risk=categorize_technical_risk(chain),
        red_flags_count=sum(1 for w in warnings if RED_FLAG in w),
        passed_basic_checks=(
            chain.is_erc20 is True
            and reputation.is_honeypot is False
            and not any("CRITICAL" in w for w in warnings)
        ),
    )


class SafetyScorer:
    """Aggregates one reputation record and one chain record into a verdict."""

    def __init__(
        self,
        reputation_weight: float = DEFAULT_REPUTATION_WEIGHT,
        chain_weight: float = DEFAULT_CHAIN_WEIGHT,
    ) -> None:
        if reputation_weight < 0 or chain_weight < 0:
            raise ValueError("Source weights must be non-negative")
        total = reputation_weight + chain_weight
        if total <= 0:
            raise ValueError("Source weights must not both be zero")
        if abs(total - 1.0) > 0.01:
            logger.warning(f"[SCORER] Weights don't sum to 1.0 (sum: {total}), normalizing")
            reputation_weight /= total
            chain_weight /= total
        self.reputation_weight = reputation_weight
        self.chain_weight = chain_weight

    def aggregate(self, reputation: ReputationRecord, chain: ChainRecord) -> SafetyVerdict:
        safety_score = compute_safety_score(
            reputation, chain, self.reputation_weight, self.chain_weight
        )
        is_honeypot = reputation.is_honeypot is True
        warnings = generate_warnings(reputation, chain)

        sources = [r.source for r in (reputation, chain) if r.ok]
        if not sources:
            logger.debug("[SCORER] No data sources available, defaulting to neutral score")

        return SafetyVerdict(
            safety_score=safety_score,
            risk_level=risk_level_for_score(safety_score),
            is_honeypot=is_honeypot,
            confidence=compute_confidence(reputation, chain),
            warnings=warnings,
            recommendations=generate_recommendations(safety_score, is_honeypot, warnings),
            sources_checked=sources,
            metadata=build_metadata(reputation, chain, warnings),
        )
