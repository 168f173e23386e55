"""Shared FastAPI dependencies"""
from fastapi import HTTPException, Request

from timersync.services.sync import Participant


def get_participant(request: Request) -> Participant:
    """The participant bound to this app at startup"""
    participant = getattr(request.app.state, "participant", None)
    if participant is None:
        raise HTTPException(status_code=503, detail="Timer sync is not running")
    return participant
