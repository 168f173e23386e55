"""Timer synchronization core"""
from .lifecycle import TimerLifecycleController, default_timer_set
from .participant import Participant, ParticipantStatus
from .ports import BroadcastChannel, TimerStore
from .reconciliation import Origin, ReconciliationEngine
from .tick_coordinator import Role, TickCoordinator, advance_running

__all__ = [
    "BroadcastChannel",
    "Origin",
    "Participant",
    "ParticipantStatus",
    "ReconciliationEngine",
    "Role",
    "TickCoordinator",
    "TimerLifecycleController",
    "TimerStore",
    "advance_running",
    "default_timer_set",
]
