"""Domain models for the application"""
from .timer import Timer, TimerPayload, TimerRow, TimerSet, TimerState

__all__ = [
    'Timer', 'TimerPayload', 'TimerRow', 'TimerSet', 'TimerState',
]
