"""honeypot.is API client, scam/honeypot simulation for EVM tokens."""

import asyncio

import httpx
from loguru import logger

from src.parsers.coerce import (
    as_dict,
    get_path,
    normalize_address,
    to_bool,
    to_float,
    to_int,
    to_str,
    to_tax_percent,
)
from src.parsers.records import NEUTRAL_RISK_SCORE, ReputationRecord

BASE_URL = "https://api.honeypot.is/v2/IsHoneypot"
USER_AGENT = "TokenSafetyCheck/1.0"

# honeypot.is summary.risk label -> risk score (higher = more dangerous)
RISK_LABEL_SCORES: dict[str, int] = {
    "very_low": 5,
    "low": 20,
    "medium": 50,
    "high": 75,
    "very_high": 90,
    "honeypot": 100,
    "unknown": NEUTRAL_RISK_SCORE,
}


class HoneypotApiError(Exception):
    """Non-2xx response from honeypot.is."""


class HoneypotIsClient:
    """Async HTTP client for honeypot.is (free, no API key).

    Returns a ``ReputationRecord`` for every call; failures become an
    errored record after the retry budget is spent.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def check_token(self, token_address: str, chain_id: int) -> ReputationRecord:
        """Fetch and normalize the honeypot.is report for one token."""
        address = normalize_address(token_address)
        params = {"address": address, "chainID": str(chain_id)}
        last_error = "unknown error"

        for attempt in range(self._max_retries + 1):
            try:
                resp = await self._client.get(self._base_url, params=params)
                if not 200 <= resp.status_code < 300:
                    raise HoneypotApiError(f"API returned {resp.status_code}: {resp.text[:200]}")
                data = resp.json()
                record = parse_report(data)
                logger.debug(
                    f"[HONEYPOT] {address[:12]} chain={chain_id} risk={record.risk_label} "
                    f"honeypot={record.is_honeypot} (attempt {attempt + 1})"
                )
                return record

            except httpx.TimeoutException:
                last_error = f"Request timeout after {self._timeout}s"
            except (httpx.HTTPError, HoneypotApiError, ValueError) as e:
                last_error = str(e) or type(e).__name__
            except Exception as e:
                last_error = f"Unexpected {type(e).__name__}: {str(e)[:200]}"

            if attempt < self._max_retries:
                delay = self._retry_delay * 2**attempt
                logger.debug(
                    f"[HONEYPOT] Attempt {attempt + 1} failed ({last_error}), retry in {delay}s"
                )
                await asyncio.sleep(delay)

        attempts = self._max_retries + 1
        logger.warning(f"[HONEYPOT] Failed after {attempts} attempts for {address[:12]}: {last_error}")
        return ReputationRecord.failed(f"Failed after {attempts} attempts: {last_error}")


def risk_label_to_score(label: str | None) -> int:
    """Map a honeypot.is risk label to a 0-100 risk score."""
    if not label:
        return NEUTRAL_RISK_SCORE
    key = "_".join(label.strip().lower().split())
    return RISK_LABEL_SCORES.get(key, NEUTRAL_RISK_SCORE)


def parse_report(data: object) -> ReputationRecord:
    """Parse a honeypot.is response. Shape deviations become missing fields."""
    data = as_dict(data)
    simulation = as_dict(data.get("simulationResult"))
    holders = as_dict(data.get("holderAnalysis"))
    contract = as_dict(data.get("contractCode"))
    token = as_dict(data.get("token"))

    label = to_str(get_path(data, "summary", "risk")) or "unknown"

    return ReputationRecord(
        risk_label=label,
        risk_score=risk_label_to_score(label),
        is_honeypot=to_bool(get_path(data, "honeypotResult", "isHoneypot")),
        honeypot_reason=to_str(get_path(data, "honeypotResult", "honeypotReason")) or "",
        buy_tax=to_tax_percent(simulation.get("buyTax")),
        sell_tax=to_tax_percent(simulation.get("sellTax")),
        transfer_tax=to_tax_percent(simulation.get("transferTax")),
        buy_gas_used=to_int(simulation.get("buyGas")),
        sell_gas_used=to_int(simulation.get("sellGas")),
        holder_count=to_int(holders.get("holders")),
        top_10_holders_percent=to_float(holders.get("top10Percent")),
        contract_verified=to_bool(contract.get("openSource")),
        is_proxy=to_bool(contract.get("isProxy")),
        token_name=to_str(token.get("name")),
        token_symbol=to_str(token.get("symbol")),
        liquidity_usd=to_float(get_path(data, "pair", "liquidity", "usd")),
        liquidity_locked=to_bool(get_path(data, "pair", "liquidity", "locked")),
        created_at=to_str(token.get("createdAt")),
    )
