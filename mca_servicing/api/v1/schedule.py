"""POST /v1/payback-plans/schedule - Payback schedule preview for plan forms"""

from fastapi import APIRouter

from mca_servicing.api.v1.schemas import ScheduleRequest, ScheduleResponse
from mca_servicing.domain.paybacks import calculate_term_length
from mca_servicing.domain.schedule import calculate_schedule, parse_frequency
from mca_servicing.infrastructure.observability.metrics import record_schedule_preview

router = APIRouter()


@router.post("/payback-plans/schedule", response_model=ScheduleResponse)
def preview_schedule(request_body: ScheduleRequest):
    """
    Calculate next payback date and scheduled end date without persisting.

    Incomplete input yields empty strings rather than an error, so a form
    can call this on every change.
    """
    result = calculate_schedule(
        request_body.start_date,
        request_body.frequency,
        request_body.payday_list,
        request_body.payback_count,
        today=request_body.as_of,
    )
    record_schedule_preview(request_body.frequency, result.next_payback_date, result.scheduled_end_date)

    return ScheduleResponse(
        next_payback_date=result.next_payback_date,
        scheduled_end_date=result.scheduled_end_date,
        term_length=calculate_term_length(
            parse_frequency(request_body.frequency),
            request_body.payday_list,
            request_body.payback_count,
        ),
    )
