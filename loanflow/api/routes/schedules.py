"""Amortization schedule routes."""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from loanflow.api.deps import get_current_user_id, get_schedule_service
from loanflow.api.schemas import ScheduleEntryResponse, ScheduleRequest, ScheduleResponse
from loanflow.config import settings
from loanflow.models.loan import AmortizationScheduleEntry
from loanflow.services.schedule import ScheduleService

router = APIRouter(prefix="/api/v1/schedules", tags=["schedules"])


def entry_response(entry: AmortizationScheduleEntry) -> ScheduleEntryResponse:
    return ScheduleEntryResponse(**asdict(entry))


@router.post("", response_model=ScheduleResponse)
async def calculate_schedule(
    req: ScheduleRequest,
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Regenerate one of the caller's loan schedules; the response carries the first year only."""
    result = await service.regenerate(
        owner_id=user_id,
        loan_id=req.loan_id,
        principal=req.principal,
        annual_rate=req.annual_rate,
        term_months=req.term_months,
        start_date=req.start_date,
        monthly_payment=req.monthly_payment,
    )
    return ScheduleResponse(
        schedule=[entry_response(e) for e in result.preview(settings.schedule_preview_size)],
        total_entries=result.total_entries,
    )
