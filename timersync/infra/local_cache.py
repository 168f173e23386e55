"""Local fallback cache for the latest known timer set"""
import json
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from timersync import config
from timersync.models import Timer, TimerSet

logger = logging.getLogger(__name__)

_timer_list = TypeAdapter(List[Timer])

CacheListener = Callable[[TimerSet], None]


class LocalFallbackCache:
    """
    Write-through, best-effort mirror of the timer set on local disk.

    Reads and writes are synchronous and never raise: failures are logged and
    treated as an empty cache. Listeners are notified after every successful
    write so other views in the same process can react.
    """

    def __init__(self, path: Union[str, Path] = config.LOCAL_CACHE_PATH):
        self._path = Path(path)
        self._listeners: List[CacheListener] = []

    @property
    def path(self) -> Path:
        return self._path

    def add_listener(self, listener: CacheListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: CacheListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def write(self, timer_set: TimerSet) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(timer_set.to_wire()), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            logger.warning(f"Error writing local timer cache {self._path}: {e}")
            return

        for listener in list(self._listeners):
            try:
                listener(timer_set)
            except Exception as e:
                logger.warning(f"Timer cache listener failed: {e}")

    def read(self) -> Optional[TimerSet]:
        """Return the cached set, or None if missing, empty or unreadable"""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Error reading local timer cache {self._path}: {e}")
            return None

        try:
            timers = _timer_list.validate_json(raw)
            timer_set = TimerSet.of(timers)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed local timer cache: {e}")
            return None

        if len(timer_set) == 0:
            return None
        return timer_set
