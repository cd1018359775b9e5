"""Tests for the safety scorer (aggregation of reputation + chain records)."""

import pytest

from src.parsers.records import ChainRecord, ContractChecks, ReputationRecord
from src.parsers.safety_scorer import (
    HONEYPOT_RECOMMENDATIONS,
    SafetyScorer,
    build_metadata,
    categorize_centralization_risk,
    categorize_tax_risk,
    categorize_technical_risk,
    compute_confidence,
    compute_safety_score,
    generate_recommendations,
    generate_warnings,
    risk_level_for_score,
)
from src.parsers.safety_types import RiskBucket, RiskLevel


def _reputation(**kwargs) -> ReputationRecord:
    return ReputationRecord(**kwargs)


def _chain(**kwargs) -> ChainRecord:
    defaults = {
        "is_contract": True,
        "has_code": True,
        "is_erc20": True,
        "code_size": 2000,
        "checks": ContractChecks(True, True, True, True, True, True),
        "risk_score": 0,
    }
    defaults.update(kwargs)
    return ChainRecord(**defaults)


def _neutral_chain() -> ChainRecord:
    """Contract-less record that triggers no chain warnings."""
    return ChainRecord()


class TestRiskLevel:
    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (100, RiskLevel.SAFE),
            (80, RiskLevel.SAFE),
            (79, RiskLevel.LOW_RISK),
            (60, RiskLevel.LOW_RISK),
            (59, RiskLevel.MEDIUM_RISK),
            (40, RiskLevel.MEDIUM_RISK),
            (39, RiskLevel.HIGH_RISK),
            (20, RiskLevel.HIGH_RISK),
            (19, RiskLevel.CRITICAL),
            (0, RiskLevel.CRITICAL),
        ],
    )
    def test_boundaries(self, score: int, level: RiskLevel) -> None:
        assert risk_level_for_score(score) is level

    def test_monotone(self) -> None:
        order = list(RiskLevel)[::-1]  # CRITICAL .. SAFE
        ranks = [order.index(risk_level_for_score(s)) for s in range(101)]
        assert ranks == sorted(ranks)


class TestSafetyScore:
    def test_weighted_average(self) -> None:
        rep = _reputation(risk_score=10)
        chain = _chain(risk_score=5)
        # 90 * 0.6 + 95 * 0.4 = 92
        assert compute_safety_score(rep, chain) == 92

    def test_errored_source_is_dropped(self) -> None:
        rep = _reputation(risk_score=30)
        chain = ChainRecord.failed("rpc down")
        assert compute_safety_score(rep, chain) == 70

    def test_both_errored_is_neutral(self) -> None:
        score = compute_safety_score(
            ReputationRecord.failed("timeout"), ChainRecord.failed("rpc down")
        )
        assert score == 50

    def test_rounds_half_up(self) -> None:
        # 95 * 0.5 + 90 * 0.5 = 92.5
        rep = _reputation(risk_score=5)
        chain = _chain(risk_score=10)
        assert compute_safety_score(rep, chain, 0.5, 0.5) == 93

    def test_stays_in_range(self) -> None:
        for rep_risk in (0, 50, 100):
            for chain_risk in (0, 50, 100):
                score = compute_safety_score(
                    _reputation(risk_score=rep_risk), _chain(risk_score=chain_risk)
                )
                assert 0 <= score <= 100


class TestScorerWeights:
    def test_defaults(self) -> None:
        scorer = SafetyScorer()
        assert scorer.reputation_weight == 0.6
        assert scorer.chain_weight == 0.4

    def test_normalizes_when_sum_is_off(self) -> None:
        scorer = SafetyScorer(3, 2)
        assert scorer.reputation_weight == pytest.approx(0.6)
        assert scorer.chain_weight == pytest.approx(0.4)

    def test_rejects_bad_weights(self) -> None:
        with pytest.raises(ValueError):
            SafetyScorer(0, 0)
        with pytest.raises(ValueError):
            SafetyScorer(-1, 2)


class TestConfidence:
    def test_both_sources_rich_data(self) -> None:
        rep = _reputation(contract_verified=True, holder_count=500, liquidity_usd=50_000)
        assert compute_confidence(rep, _chain()) == pytest.approx(1.0)

    def test_one_source_errored(self) -> None:
        rep = _reputation(contract_verified=True)
        assert compute_confidence(rep, ChainRecord.failed("rpc down")) == pytest.approx(0.7)

    def test_both_errored(self) -> None:
        conf = compute_confidence(ReputationRecord.failed("x"), ChainRecord.failed("y"))
        assert conf == pytest.approx(0.5)

    def test_more_corroboration_is_not_less_confident(self) -> None:
        rich = compute_confidence(
            _reputation(contract_verified=True, holder_count=500), _chain()
        )
        degraded = compute_confidence(
            _reputation(contract_verified=True, holder_count=500), ChainRecord.failed("x")
        )
        assert rich > degraded

    def test_name_symbol_counted_twice(self) -> None:
        """Known redundancy: has_name/has_symbol add on top of the compliance bonus."""
        rep = _reputation()
        bare = _chain(checks=ContractChecks(False, False, True, True, True, True))
        full = _chain()
        assert compute_confidence(rep, full) - compute_confidence(rep, bare) == pytest.approx(0.05)
        assert compute_confidence(rep, bare) == pytest.approx(0.5 + 0.3 + 0.05)

    def test_errored_reputation_ignores_its_fields(self) -> None:
        rep = ReputationRecord.failed("x")
        rep.contract_verified = True
        assert compute_confidence(rep, _chain()) == pytest.approx(0.5 + 0.1 + 0.1)


class TestWarnings:
    def test_clean_inputs_have_no_warnings(self) -> None:
        assert generate_warnings(_reputation(), _neutral_chain()) == []

    def test_honeypot_with_reason(self) -> None:
        rep = _reputation(is_honeypot=True, honeypot_reason="cannot sell")
        warnings = generate_warnings(rep, _neutral_chain())
        assert len(warnings) == 2
        assert "HONEYPOT DETECTED" in warnings[0]
        assert "🚨" in warnings[0]
        assert warnings[1] == "Reason: cannot sell"

    def test_honeypot_without_reason(self) -> None:
        warnings = generate_warnings(_reputation(is_honeypot=True), _neutral_chain())
        assert len(warnings) == 1

    @pytest.mark.parametrize(
        ("sell_tax", "expected"),
        [
            (55, "CRITICAL sell tax: 55.0%"),
            (25, "Very high sell tax: 25.0%"),
            (15, "High sell tax: 15.0%"),
            (7, "Moderate sell tax: 7.0%"),
        ],
    )
    def test_sell_tax_tiers_exclusive(self, sell_tax: float, expected: str) -> None:
        warnings = generate_warnings(_reputation(sell_tax=sell_tax), _neutral_chain())
        assert len(warnings) == 1
        assert expected in warnings[0]

    def test_sell_tax_at_threshold_does_not_fire(self) -> None:
        assert generate_warnings(_reputation(sell_tax=5), _neutral_chain()) == []

    @pytest.mark.parametrize(
        ("buy_tax", "expected"),
        [
            (55, "Very high buy tax: 55.0%"),
            (25, "Very high buy tax: 25.0%"),
            (15, "High buy tax: 15.0%"),
            (7, "Moderate buy tax: 7.0%"),
        ],
    )
    def test_buy_tax_has_no_critical_tier(self, buy_tax: float, expected: str) -> None:
        warnings = generate_warnings(_reputation(buy_tax=buy_tax), _neutral_chain())
        assert len(warnings) == 1
        assert expected in warnings[0]
        assert "CRITICAL" not in warnings[0]

    @pytest.mark.parametrize(
        ("top10", "expected"),
        [
            (95, "EXTREME centralization"),
            (80, "Very high centralization"),
            (60, "High centralization"),
        ],
    )
    def test_holder_tiers_exclusive(self, top10: float, expected: str) -> None:
        warnings = generate_warnings(_reputation(top_10_holders_percent=top10), _neutral_chain())
        assert len(warnings) == 1
        assert expected in warnings[0]

    def test_holders_at_fifty_do_not_fire(self) -> None:
        assert generate_warnings(_reputation(top_10_holders_percent=50), _neutral_chain()) == []

    def test_unverified_only_when_explicit(self) -> None:
        assert generate_warnings(_reputation(contract_verified=None), _neutral_chain()) == []
        warnings = generate_warnings(_reputation(contract_verified=False), _neutral_chain())
        assert warnings == ["⚠️ Contract source code not verified"]

    def test_proxy(self) -> None:
        warnings = generate_warnings(_reputation(is_proxy=True), _neutral_chain())
        assert len(warnings) == 1
        assert "Proxy contract" in warnings[0]

    def test_not_a_contract(self) -> None:
        chain = ChainRecord(is_contract=False, is_erc20=False, risk_score=100)
        warnings = generate_warnings(_reputation(), chain)
        assert len(warnings) == 1
        assert "🚨 Not a smart contract" in warnings[0]

    def test_contract_not_compliant(self) -> None:
        warnings = generate_warnings(_reputation(), _chain(is_erc20=False))
        assert warnings == ["⚠️ Does not implement standard ERC20 interface"]

    def test_small_code(self) -> None:
        warnings = generate_warnings(_reputation(), _chain(code_size=99))
        assert warnings == ["⚠️ Suspiciously small contract code"]

    def test_large_code(self) -> None:
        warnings = generate_warnings(_reputation(), _chain(code_size=50_001))
        assert warnings == ["⚠️ Unusually large contract - Possible obfuscation"]

    def test_order(self) -> None:
        rep = _reputation(
            is_honeypot=True, sell_tax=60, buy_tax=12, top_10_holders_percent=80,
            contract_verified=False, is_proxy=True,
        )
        warnings = generate_warnings(rep, _chain(is_erc20=False, code_size=50))
        assert [w.split()[1] for w in warnings] == [
            "HONEYPOT", "CRITICAL", "High", "Very", "Contract", "Proxy", "Does", "Suspiciously",
        ]


class TestRecommendations:
    def test_honeypot_overrides_high_score(self) -> None:
        recs = generate_recommendations(95, True, ["x"])
        assert recs == list(HONEYPOT_RECOMMENDATIONS)
        assert len(recs) == 2
        assert "DO NOT INTERACT" in recs[0]

    @pytest.mark.parametrize(
        ("score", "first", "count_line"),
        [
            (90, "Generally safe", "Note 2 minor warning(s)"),
            (70, "Exercise caution", "Review 2 warning(s)"),
            (50, "HIGH RISK", "2 significant warning(s) found"),
            (30, "VERY HIGH RISK", "Found 2 critical warning(s)"),
            (10, "CRITICAL RISK", "2 critical issue(s) found"),
        ],
    )
    def test_every_bracket_reports_warning_count(
        self, score: int, first: str, count_line: str
    ) -> None:
        with_warnings = generate_recommendations(score, False, ["a", "b"])
        without = generate_recommendations(score, False, [])

        assert first in with_warnings[0]
        assert any(count_line in r for r in with_warnings)
        assert len(with_warnings) == len(without) + 1
        assert 2 <= len(without) <= 5

    def test_count_line_position_in_high_risk(self) -> None:
        recs = generate_recommendations(30, False, ["a"])
        assert "Found 1 critical warning(s)" in recs[3]
        assert "Consider safer alternatives" in recs[4]


class TestMetadata:
    @pytest.mark.parametrize(
        ("tax", "bucket"),
        [
            (0, RiskBucket.NONE),
            (5, RiskBucket.LOW),
            (10, RiskBucket.MEDIUM),
            (20, RiskBucket.HIGH),
            (20.5, RiskBucket.CRITICAL),
        ],
    )
    def test_tax_buckets(self, tax: float, bucket: RiskBucket) -> None:
        assert categorize_tax_risk(tax) is bucket

    @pytest.mark.parametrize(
        ("top10", "bucket"),
        [
            (0, RiskBucket.NONE),
            (30, RiskBucket.LOW),
            (50, RiskBucket.MEDIUM),
            (75, RiskBucket.HIGH),
            (76, RiskBucket.CRITICAL),
        ],
    )
    def test_centralization_buckets(self, top10: float, bucket: RiskBucket) -> None:
        assert categorize_centralization_risk(top10) is bucket

    def test_technical_eoa_and_non_compliant(self) -> None:
        assert categorize_technical_risk(ChainRecord(is_contract=False)) is RiskBucket.CRITICAL
        assert categorize_technical_risk(_chain(is_erc20=False)) is RiskBucket.HIGH

    @pytest.mark.parametrize(
        ("failed", "bucket"),
        [(0, RiskBucket.NONE), (1, RiskBucket.LOW), (2, RiskBucket.MEDIUM),
         (3, RiskBucket.HIGH), (4, RiskBucket.CRITICAL)],
    )
    def test_technical_failed_checks(self, failed: int, bucket: RiskBucket) -> None:
        flags = [False] * failed + [True] * (6 - failed)
        chain = _chain(checks=ContractChecks(*flags))
        assert categorize_technical_risk(chain) is bucket

    def test_uses_max_of_buy_and_sell(self) -> None:
        meta = build_metadata(_reputation(buy_tax=3, sell_tax=15), _chain(), [])
        assert meta.tax_risk is RiskBucket.HIGH

    def test_red_flags_count_critical_markers(self) -> None:
        warnings = ["🚨 one", "⚠️ two", "🚨 three", "ℹ️ four"]
        meta = build_metadata(_reputation(), _chain(), warnings)
        assert meta.red_flags_count == 2

    def test_passed_basic_checks(self) -> None:
        rep = _reputation(is_honeypot=False)
        assert build_metadata(rep, _chain(), []).passed_basic_checks is True

    def test_passed_requires_explicit_not_honeypot(self) -> None:
        rep = _reputation(is_honeypot=None)
        assert build_metadata(rep, _chain(), []).passed_basic_checks is False

    def test_critical_warning_fails_basic_checks(self) -> None:
        rep = _reputation(is_honeypot=False)
        meta = build_metadata(rep, _chain(), ["🚨 CRITICAL sell tax: 60.0% - Likely scam"])
        assert meta.passed_basic_checks is False


class TestAggregate:
    def test_safe_token_scenario(self) -> None:
        rep = _reputation(
            risk_score=10, is_honeypot=False, sell_tax=2, buy_tax=2,
            top_10_holders_percent=20, contract_verified=True,
        )
        chain = ChainRecord(risk_score=5, is_contract=True, is_erc20=True)

        verdict = SafetyScorer().aggregate(rep, chain)

        assert verdict.safety_score == 92
        assert verdict.risk_level is RiskLevel.SAFE
        assert verdict.warnings == []
        assert verdict.is_honeypot is False
        assert verdict.sources_checked == ["reputation", "chain"]
        assert verdict.metadata.passed_basic_checks is True
        assert "Generally safe" in verdict.recommendations[0]

    def test_honeypot_scenario(self) -> None:
        rep = _reputation(risk_score=100, is_honeypot=True, honeypot_reason="cannot sell")

        for chain in (_chain(), ChainRecord.failed("rpc down"), ChainRecord(is_contract=False)):
            verdict = SafetyScorer().aggregate(rep, chain)
            assert verdict.is_honeypot is True
            assert verdict.recommendations == list(HONEYPOT_RECOMMENDATIONS)
            assert any("HONEYPOT DETECTED" in w for w in verdict.warnings)
            assert "Reason: cannot sell" in verdict.warnings

    def test_eoa_scenario(self) -> None:
        chain = ChainRecord(
            is_contract=False, has_code=False, code_size=0, is_erc20=False, risk_score=100
        )
        verdict = SafetyScorer().aggregate(_reputation(risk_score=50), chain)

        assert any("🚨 Not a smart contract" in w for w in verdict.warnings)
        assert verdict.safety_score == 30  # 50 * 0.6 + 0 * 0.4
        assert verdict.metadata.technical_risk is RiskBucket.CRITICAL
        assert verdict.metadata.red_flags_count == 1

    def test_both_sources_failed(self) -> None:
        verdict = SafetyScorer().aggregate(
            ReputationRecord.failed("timeout"), ChainRecord.failed("rpc down")
        )

        assert verdict.safety_score == 50
        assert verdict.risk_level is RiskLevel.MEDIUM_RISK
        assert verdict.confidence == pytest.approx(0.5)
        assert verdict.sources_checked == []
        assert verdict.warnings == []
        assert verdict.is_honeypot is False
        assert verdict.metadata.passed_basic_checks is False

    def test_deterministic(self) -> None:
        rep = _reputation(risk_score=20, sell_tax=12, is_honeypot=False)
        chain = _chain(risk_score=15)
        scorer = SafetyScorer()
        assert scorer.aggregate(rep, chain) == scorer.aggregate(rep, chain)
