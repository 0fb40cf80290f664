"""Refinance analysis routes."""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from loanflow.api.deps import get_current_user_id, get_refinance_service
from loanflow.api.schemas import RefinanceAnalysisResponse, RefinanceRequest, RefinanceResponse
from loanflow.services.refinance import RefinanceService

router = APIRouter(prefix="/api/v1/refinance", tags=["refinance"])


@router.post("/analyze", response_model=RefinanceResponse)
async def analyze_refinancing(
    req: RefinanceRequest,
    user_id: str = Depends(get_current_user_id),
    service: RefinanceService = Depends(get_refinance_service),
):
    """Compare the caller's loan against a proposed rate and closing costs."""
    analysis = await service.analyze(user_id, req.loan_id, req.new_rate, req.closing_costs)
    return RefinanceResponse(analysis=RefinanceAnalysisResponse(**asdict(analysis)))
