# perchfinder/services/notification_service.py
import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)

CatchSavedHandler = Callable[[str], None]


class CatchSavedNotifier:
    """
    In-process broadcast of "catch saved" events.

    Handlers receive the water id; the recommendation cache and any open
    recommendation flow for that water subscribe to it.
    """

    def __init__(self):
        self._handlers: List[CatchSavedHandler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: CatchSavedHandler) -> Callable[[], None]:
        """Register a handler. Returns a function that unsubscribes it."""
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe():
            self.unsubscribe(handler)

        return unsubscribe

    def unsubscribe(self, handler: CatchSavedHandler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def publish(self, water_id: str):
        """
        Notify every handler. A failing handler is logged and does not stop
        delivery to the others.
        """
        if not water_id:
            return
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(water_id)
            except Exception as e:
                logger.error(f"catch-saved handler failed for water {water_id}: {e}", exc_info=True)
        logger.info(f"catch-saved event delivered to {len(handlers)} handler(s) for water {water_id}")


# Process-wide notifier; create_app and the recommendation client share it.
catch_saved_notifier = CatchSavedNotifier()
