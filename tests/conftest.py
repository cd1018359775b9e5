"""Shared test fixtures."""

from typing import Any

import pytest


@pytest.fixture
def honeypot_payload() -> dict[str, Any]:
    """A clean honeypot.is v2 response (trimmed to the fields we read)."""
    return {
        "token": {"name": "USD Coin", "symbol": "USDC", "createdAt": "2018-08-03T19:28:24Z"},
        "summary": {"risk": "very_low", "riskLevel": 0},
        "honeypotResult": {"isHoneypot": False},
        "simulationResult": {
            "buyTax": 0,
            "sellTax": 0,
            "transferTax": 0,
            "buyGas": "150000",
            "sellGas": "120000",
        },
        "holderAnalysis": {"holders": "1850000", "top10Percent": "22.5"},
        "contractCode": {"openSource": True, "isProxy": True},
        "pair": {"liquidity": {"usd": 25_000_000.5, "locked": False}},
    }
