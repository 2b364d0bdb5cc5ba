# slotbook/routers/scheduling.py

import logging

from fastapi import APIRouter, Depends

from slotbook.base.models import (
    AvailabilityRequest,
    AvailabilityResponse,
    BookingRequest,
    CancelResponse,
    Interview,
    PanelAvailabilityRequest,
    RescheduleRequest,
)
from slotbook.routers.dependencies import get_booking_service
from slotbook.services.booking_service import BookingService

router = APIRouter(tags=["Scheduling"])
logger = logging.getLogger("booking.router")


# === Availability ===

@router.post(
    "/availability",
    summary="Bookable slots for one interviewer",
    response_model=AvailabilityResponse,
)
async def get_availability(
    req: AvailabilityRequest,
    service: BookingService = Depends(get_booking_service),
):
    """
    Unset scheduling fields fall back to the configured defaults
    (Mon-Fri 09:00-17:00, 60 minute meetings every 30 minutes,
    15 minute buffers, 24 hours notice).
    """
    logger.info(f"[AvailabilityRequest] interviewer={req.interviewer_user_id}")
    slots = await service.get_interview_availability(req)
    return AvailabilityResponse(slots=slots, count=len(slots))


@router.post(
    "/availability/panel",
    summary="Slots every panelist can attend",
    response_model=AvailabilityResponse,
)
async def get_panel_availability(
    req: PanelAvailabilityRequest,
    service: BookingService = Depends(get_booking_service),
):
    logger.info(f"[PanelRequest] interviewers={req.interviewer_user_ids}")
    slots = await service.get_panel_availability(req)
    return AvailabilityResponse(slots=slots, count=len(slots))


# === Interviews ===

@router.post("/interviews", response_model=Interview, status_code=201)
async def book_interview(
    req: BookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    return await service.book_interview(req)


@router.get("/interviews/{interview_id}", response_model=Interview)
async def get_interview(
    interview_id: str,
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_interview(interview_id)


@router.patch("/interviews/{interview_id}/reschedule", response_model=Interview)
async def reschedule_interview(
    interview_id: str,
    req: RescheduleRequest,
    service: BookingService = Depends(get_booking_service),
):
    return await service.reschedule_interview(interview_id, req.new_start_time, req.new_end_time)


@router.post("/interviews/{interview_id}/cancel", response_model=CancelResponse)
async def cancel_interview(
    interview_id: str,
    service: BookingService = Depends(get_booking_service),
):
    interview = await service.cancel_interview(interview_id)
    return CancelResponse(status=interview.status, interview_id=interview.id)
