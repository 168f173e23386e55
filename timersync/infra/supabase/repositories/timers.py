"""Timers repository"""
import logging
from typing import List

from supabase import AsyncClient  # type: ignore

from timersync import config
from timersync.models import Timer, TimerRow
from timersync.services.sync.ports import TimerStore

from .base import BaseRepository

logger = logging.getLogger(__name__)


class TimerRepository(BaseRepository[TimerRow], TimerStore):
    """Durable store for the shared timer set"""

    def __init__(self, client: AsyncClient, table_name: str = config.TIMER_TABLE):
        super().__init__(client, table_name, TimerRow)

    async def read_all(self) -> List[Timer]:
        """Load all timers ordered by display_order. Returns [] on any error."""
        try:
            rows = await self.find_all(order_by="display_order")
        except Exception as e:
            logger.error(f"Error loading timers from database: {e}")
            return []

        return [row.to_timer() for row in rows]

    async def replace_all(self, timers: List[Timer]) -> bool:
        """
        Replace the table contents with timers, in order.

        Implemented as delete-all then insert-all. This is not atomic: a
        crash between the two requests leaves the table empty until the next
        write.
        """
        rows = [TimerRow.from_timer(timer, index) for index, timer in enumerate(timers)]

        try:
            await self.delete_all()
            await self.insert_many(rows)
        except Exception as e:
            logger.error(f"Error saving timers to database: {e}")
            return False

        logger.debug(f"Saved {len(rows)} timers to {self._table_name}")
        return True
