# backend/notifications/notifier.py

import logging
import threading
from typing import Callable, Dict, Hashable

# Live-update fan-out: every connected ballot/admin view is an observer that
# re-fetches state when it receives an event. Events carry no payload.

logger = logging.getLogger(__name__)

CANDIDATES_UPDATED = 'candidates-updated'
VOTE_SUBMITTED = 'vote-submitted'


class ChangeNotifier:
    def __init__(self):
        self._observers: Dict[Hashable, Callable[[str], None]] = {}
        self._lock = threading.Lock()

    def connect(self, observer_id: Hashable, handle: Callable[[str], None]) -> None:
        with self._lock:
            self._observers[observer_id] = handle
        logger.info("Observer %s connected (%d active)", observer_id, self.observer_count())

    def disconnect(self, observer_id: Hashable) -> None:
        with self._lock:
            removed = self._observers.pop(observer_id, None)
        if removed is not None:
            logger.info("Observer %s disconnected (%d active)", observer_id, self.observer_count())

    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def notify(self, event_kind: str) -> int:
        """
        Push `event_kind` to every observer connected at the time of the call.

        Delivery is fire-and-forget: an observer whose handle raises is dropped
        and the error is only logged, so the mutation that triggered the event
        is never affected.

        Returns:
            delivered (int): number of observers the event was handed to.
        """
        with self._lock:
            snapshot = list(self._observers.items())

        delivered = 0
        for observer_id, handle in snapshot:
            try:
                handle(event_kind)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping observer %s after failed %r delivery: %s", observer_id, event_kind, e)
                self.disconnect(observer_id)
        logger.debug("Event %r delivered to %d observer(s)", event_kind, delivered)
        return delivered
