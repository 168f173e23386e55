"""Supabase Realtime broadcast channel"""
import logging
from typing import Any, Dict, List, Optional

from realtime import RealtimeSubscribeStates  # type: ignore
from supabase import AsyncClient  # type: ignore

from timersync import config
from timersync.models import TimerPayload, TimerSet
from timersync.services.sync.ports import BroadcastCallback, BroadcastChannel, StatusListener

logger = logging.getLogger(__name__)


class SupabaseBroadcastChannel(BroadcastChannel):
    """
    Broadcast adapter over a Supabase Realtime channel.

    The channel is created with broadcast.self enabled so that the publisher
    receives its own messages. Reconnection is handled by the realtime
    client; messages missed while disconnected are not replayed.
    """

    def __init__(
        self,
        client: AsyncClient,
        topic: str = config.TIMER_CHANNEL,
        event: str = config.TIMER_BROADCAST_EVENT,
    ):
        self._client = client
        self._topic = topic
        self._event = event
        self._channel: Optional[Any] = None
        self._connected = False
        self._status_listeners: List[StatusListener] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    def on_status_change(self, listener: StatusListener) -> None:
        self._status_listeners.append(listener)

    def _set_connected(self, connected: bool) -> None:
        if connected == self._connected:
            return
        self._connected = connected
        if connected:
            logger.info(f"Realtime channel '{self._topic}' subscribed")
        else:
            logger.warning(f"Realtime channel '{self._topic}' disconnected")
        for listener in self._status_listeners:
            listener(connected)

    def _on_subscribe(self, status: RealtimeSubscribeStates, err: Optional[Exception]) -> None:
        if err:
            logger.warning(f"Realtime channel '{self._topic}' status {status}: {err}")
        self._set_connected(status == RealtimeSubscribeStates.SUBSCRIBED)

    async def subscribe(self, callback: BroadcastCallback) -> None:
        def _on_broadcast(message: Dict[str, Any]) -> None:
            # realtime wraps the body as {"event", "type", "payload"}
            body = message
            if isinstance(message, dict) and "timers" not in message and "payload" in message:
                body = message["payload"]
            callback(body)

        channel = self._client.channel(
            self._topic,
            {"config": {"broadcast": {"self": True, "ack": False}}},
        )
        channel.on_broadcast(self._event, _on_broadcast)
        self._channel = channel
        await channel.subscribe(self._on_subscribe)

    async def publish(self, timer_set: TimerSet, timestamp_ms: int) -> None:
        if self._channel is None or not self._connected:
            logger.debug(f"Channel '{self._topic}' not connected, skipping broadcast")
            return

        payload = TimerPayload(timers=list(timer_set.timers), last_update=timestamp_ms)
        try:
            await self._channel.send_broadcast(
                self._event,
                payload.model_dump(by_alias=True, mode="json"),
            )
        except Exception as e:
            logger.warning(f"Error broadcasting timers: {e}")

    async def close(self) -> None:
        if self._channel is None:
            return
        try:
            await self._client.remove_channel(self._channel)
        except Exception as e:
            logger.warning(f"Error closing realtime channel: {e}")
        finally:
            self._channel = None
            self._set_connected(False)
