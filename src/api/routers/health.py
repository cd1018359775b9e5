"""Health check and chain listing, no auth required."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.app import SERVICE_VERSION
from src.api.dependencies import get_checker
from src.parsers.onchain.chains import chain_name
from src.parsers.safety_check import TokenSafetyChecker

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    ok: bool
    status: str
    version: str
    chains_configured: int


class ChainInfo(BaseModel):
    chain_id: int
    name: str


@router.get("/health", response_model=HealthResponse)
async def health_check(checker: TokenSafetyChecker = Depends(get_checker)) -> HealthResponse:
    """Liveness plus a hint when no RPC endpoint is configured."""
    chains = len(checker.supported_chains)
    return HealthResponse(
        ok=True,
        status="ok" if chains else "degraded",
        version=SERVICE_VERSION,
        chains_configured=chains,
    )


@router.get("/chains", response_model=list[ChainInfo])
async def list_chains(checker: TokenSafetyChecker = Depends(get_checker)) -> list[ChainInfo]:
    return [ChainInfo(chain_id=c, name=chain_name(c)) for c in checker.supported_chains]
