"""In-process reminder scheduler backed by ``threading.Timer``.

Suitable for the dev server and tests; real deployments hand reminders to a
push/notification service implementing the same two methods.
"""

import hashlib
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from ..services.reminders import Reminder

logger = logging.getLogger(__name__)

Callback = Callable[[Reminder], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ThreadedReminderScheduler:
    def __init__(self, callback: Callback, clock: Callable[[], datetime] = _utcnow) -> None:
        self._callback = callback
        self._clock = clock
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def _id(self, reminder: Reminder) -> str:
        raw = f"{reminder.when.isoformat()}|{reminder.title}"
        return "rem_" + hashlib.sha256(raw.encode()).hexdigest()[:16]

    def _fire(self, rid: str, reminder: Reminder) -> None:
        with self._lock:
            self._timers.pop(rid, None)
        try:
            self._callback(reminder)
        except Exception:
            logger.exception("reminder_callback_failed", extra={"reminder_id": rid})

    def schedule(self, reminders: Sequence[Reminder]) -> List[str]:
        """Arm a timer per reminder; past reminders are skipped."""

        now = self._clock()
        ids: List[str] = []
        for reminder in reminders:
            delay = (reminder.when - now).total_seconds()
            if delay <= 0:
                logger.info("reminder_in_past_skipped", extra={"title": reminder.title})
                continue
            rid = self._id(reminder)
            timer = threading.Timer(delay, self._fire, args=(rid, reminder))
            timer.daemon = True
            with self._lock:
                previous = self._timers.pop(rid, None)
                if previous is not None:
                    previous.cancel()
                self._timers[rid] = timer
            timer.start()
            ids.append(rid)
        return ids

    def cancel(self, rid: str) -> bool:
        with self._lock:
            timer: Optional[threading.Timer] = self._timers.pop(rid, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def pending(self) -> List[str]:
        with self._lock:
            return list(self._timers)
