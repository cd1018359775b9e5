"""Token safety check, one request, two sources, one verdict.

Both sources run concurrently and always settle into a record (errored
or not); the scorer only runs after both are done.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from loguru import logger

from config.settings import Settings
from src.parsers.exceptions import InvalidRequestError, UnsupportedChainError
from src.parsers.honeypot_is.client import HoneypotIsClient
from src.parsers.onchain.analyzer import OnChainAnalyzer
from src.parsers.onchain.chains import chain_name
from src.parsers.safety_scorer import SafetyScorer
from src.parsers.safety_types import SafetyCheckResult


class TokenSafetyChecker:
    def __init__(
        self,
        honeypot: HoneypotIsClient,
        onchain: OnChainAnalyzer,
        scorer: SafetyScorer | None = None,
    ) -> None:
        self._honeypot = honeypot
        self._onchain = onchain
        self._scorer = scorer or SafetyScorer()

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenSafetyChecker:
        """Build long-lived clients once at startup."""
        honeypot = HoneypotIsClient(
            settings.honeypot_api_url,
            timeout=settings.honeypot_timeout_sec,
            max_retries=settings.honeypot_max_retries,
            retry_delay=settings.honeypot_retry_delay_sec,
        )
        onchain = OnChainAnalyzer.from_rpc_urls(
            settings.rpc_urls(),
            timeout=settings.rpc_timeout_sec,
            call_timeout=settings.rpc_call_timeout_sec,
            max_retries=settings.rpc_max_retries,
            retry_delay=settings.rpc_retry_delay_sec,
        )
        scorer = SafetyScorer(settings.reputation_weight, settings.chain_weight)
        return cls(honeypot, onchain, scorer)

    @property
    def supported_chains(self) -> list[int]:
        return self._onchain.supported_chains

    async def close(self) -> None:
        await self._honeypot.close()
        await self._onchain.close()

    async def check(self, token_address: str, chain_id: int) -> SafetyCheckResult:
        """Run a full safety check.

        Raises ``InvalidRequestError`` / ``UnsupportedChainError`` before any
        source is queried; source failures never raise.
        """
        if not token_address or not token_address.strip():
            raise InvalidRequestError("token_address is required")
        if chain_id <= 0:
            raise InvalidRequestError(f"chain_id must be positive, got {chain_id}")
        if not self._onchain.is_chain_supported(chain_id):
            raise UnsupportedChainError(chain_id, self.supported_chains)

        token_address = token_address.strip()
        name = chain_name(chain_id)
        logger.info(f"[SAFETY] Analyzing {token_address} on chain {chain_id} ({name})")

        reputation, chain = await asyncio.gather(
            self._honeypot.check_token(token_address, chain_id),
            self._onchain.analyze_token(token_address, chain_id),
        )
        verdict = self._scorer.aggregate(reputation, chain)

        logger.info(
            f"[SAFETY] {token_address[:12]} -> {verdict.risk_level.value} "
            f"(score: {verdict.safety_score}, confidence: {verdict.confidence:.2f}, "
            f"warnings: {len(verdict.warnings)}, sources: {','.join(verdict.sources_checked) or 'none'})"
        )

        return SafetyCheckResult(
            token_address=token_address,
            chain_id=chain_id,
            chain_name=name,
            verdict=verdict,
            reputation=reputation,
            chain=chain,
            checked_at=datetime.now(timezone.utc),
        )
