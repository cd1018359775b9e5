"""Token safety endpoint, the one operation the service exists for."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from config.settings import settings
from src.api.app import limiter
from src.api.dependencies import get_checker
from src.parsers.safety_check import TokenSafetyChecker

router = APIRouter(prefix="/api/v1/safety", tags=["safety"])


class SafetyCheckRequest(BaseModel):
    token_address: str = Field(min_length=1, max_length=100, description="Token contract address")
    chain_id: int = Field(gt=0, description="EVM chain id (1=Ethereum, 56=BSC, 137=Polygon, ...)")


class VerdictMetadataOut(BaseModel):
    tax_risk: str
    centralization_risk: str
    technical_risk: str
    red_flags_count: int
    passed_basic_checks: bool


class SafetyCheckResponse(BaseModel):
    token_address: str
    chain_id: int
    chain_name: str
    safety_score: int = Field(ge=0, le=100, description="0-100, higher = safer")
    risk_level: str
    is_honeypot: bool
    confidence: float = Field(ge=0, le=1)
    warnings: list[str]
    recommendations: list[str]
    metadata: VerdictMetadataOut
    details: dict
    sources_checked: list[str]
    timestamp: str


@router.post("/check", response_model=SafetyCheckResponse)
@limiter.limit(settings.check_rate_limit)
async def check_token_safety(
    request: Request,
    body: SafetyCheckRequest,
    checker: TokenSafetyChecker = Depends(get_checker),
) -> SafetyCheckResponse:
    """Analyze a token for honeypot / scam characteristics."""
    result = await checker.check(body.token_address, body.chain_id)
    verdict = result.verdict
    meta = verdict.metadata

    return SafetyCheckResponse(
        token_address=result.token_address,
        chain_id=result.chain_id,
        chain_name=result.chain_name,
        safety_score=verdict.safety_score,
        risk_level=verdict.risk_level.value,
        is_honeypot=verdict.is_honeypot,
        confidence=verdict.confidence,
        warnings=verdict.warnings,
        recommendations=verdict.recommendations,
        metadata=VerdictMetadataOut(
            tax_risk=meta.tax_risk.value,
            centralization_risk=meta.centralization_risk.value,
            technical_risk=meta.technical_risk.value,
            red_flags_count=meta.red_flags_count,
            passed_basic_checks=meta.passed_basic_checks,
        ),
        details=result.details(),
        sources_checked=verdict.sources_checked,
        timestamp=result.checked_at.isoformat(),
    )
