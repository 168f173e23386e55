from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from timersync import config
from timersync.api.deps import get_participant
from timersync.models import Timer, TimerSet
from timersync.services.sync import Participant, Role
from timersync.utils.time_format import format_time, split_duration, to_seconds

router = APIRouter(prefix="/api/timers", tags=["timers"])

_DEFAULT_MINUTES, _DEFAULT_SECONDS = split_duration(config.DEFAULT_DURATION_SECONDS)


# Request/Response models
class TimerView(Timer):
    """Timer with presentation fields precomputed"""
    display: str
    progress: float


class TimerListResponse(BaseModel):
    timers: List[TimerView]
    count: int


class StatusResponse(TimerListResponse):
    connected: bool
    role: Role


class AddTimerRequest(BaseModel):
    minutes: int = Field(_DEFAULT_MINUTES, ge=0)
    seconds: int = Field(_DEFAULT_SECONDS, ge=0, le=59)
    name: Optional[str] = None


class UpdateTimerRequest(BaseModel):
    name: Optional[str] = None
    minutes: Optional[int] = Field(None, ge=0)
    seconds: Optional[int] = Field(None, ge=0, le=59)


def _to_view(timer: Timer) -> TimerView:
    return TimerView(
        **timer.model_dump(),
        display=format_time(timer.time_remaining),
        progress=round(timer.progress_percentage(), 2),
    )


def _list_response(timer_set: TimerSet) -> dict:
    return {
        "timers": [_to_view(timer) for timer in timer_set.timers],
        "count": len(timer_set),
    }


def _require_timer(participant: Participant, timer_id: str) -> Timer:
    timer = participant.timers.find(timer_id)
    if timer is None:
        raise HTTPException(status_code=404, detail="Timer not found")
    return timer


@router.get("", response_model=StatusResponse)
async def get_timers(participant: Participant = Depends(get_participant)):
    """Current timers plus connection status and countdown role"""
    status = participant.status()
    return {
        **_list_response(participant.timers),
        "connected": status.connected,
        "role": status.role,
    }


@router.post("", response_model=TimerListResponse)
async def add_timer(request: AddTimerRequest, participant: Participant = Depends(get_participant)):
    """Append a stopped timer"""
    timer_set = await participant.controller.add_timer(
        duration_seconds=to_seconds(request.minutes, request.seconds),
        name=request.name,
    )
    return _list_response(timer_set)


@router.post("/pause-all", response_model=TimerListResponse)
async def pause_all(participant: Participant = Depends(get_participant)):
    """Pause every running timer"""
    return _list_response(await participant.controller.pause_all())


@router.post("/reset-all", response_model=TimerListResponse)
async def reset_all(participant: Participant = Depends(get_participant)):
    """Stop every timer and restore its full duration"""
    return _list_response(await participant.controller.reset_all())


@router.post("/{timer_id}/start", response_model=TimerListResponse)
async def start_timer(timer_id: str, participant: Participant = Depends(get_participant)):
    _require_timer(participant, timer_id)
    return _list_response(await participant.controller.start_timer(timer_id))


@router.post("/{timer_id}/pause", response_model=TimerListResponse)
async def pause_timer(timer_id: str, participant: Participant = Depends(get_participant)):
    _require_timer(participant, timer_id)
    return _list_response(await participant.controller.pause_timer(timer_id))


@router.post("/{timer_id}/reset", response_model=TimerListResponse)
async def reset_timer(timer_id: str, participant: Participant = Depends(get_participant)):
    _require_timer(participant, timer_id)
    return _list_response(await participant.controller.reset_timer(timer_id))


@router.patch("/{timer_id}", response_model=TimerListResponse)
async def update_timer(
    timer_id: str,
    request: UpdateTimerRequest,
    participant: Participant = Depends(get_participant),
):
    """
    Rename and/or retime a timer.

    When only one of minutes/seconds is given the other keeps its current
    value. Retiming always stops the timer.
    """
    timer = _require_timer(participant, timer_id)
    timer_set = participant.timers

    if request.name is not None:
        timer_set = await participant.controller.rename_timer(timer_id, request.name)
        # Pick up ticks or remote sets that landed during the rename
        timer = participant.timers.find(timer_id) or timer

    if request.minutes is not None or request.seconds is not None:
        current_minutes, current_seconds = split_duration(timer.total_time)
        timer_set = await participant.controller.retime_timer(
            timer_id,
            request.minutes if request.minutes is not None else current_minutes,
            request.seconds if request.seconds is not None else current_seconds,
        )

    return _list_response(timer_set)


@router.delete("/{timer_id}", response_model=TimerListResponse)
async def remove_timer(timer_id: str, participant: Participant = Depends(get_participant)):
    """Remove a timer. The last remaining timer is never removed."""
    _require_timer(participant, timer_id)
    return _list_response(await participant.controller.remove_timer(timer_id))
