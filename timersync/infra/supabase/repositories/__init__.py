"""Repository exports"""
from .base import BaseRepository
from .timers import TimerRepository

__all__ = [
    'BaseRepository',
    'TimerRepository',
]
