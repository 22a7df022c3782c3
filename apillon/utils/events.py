import inspect
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

STATE_CHANGED = "state_changed"
FILE_UPLOADED = "file_uploaded"


class EventEmitter:
    """Simple event emitter for upload progress."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)

    def off(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        if callback in self._listeners.get(event_name, []):
            self._listeners[event_name].remove(callback)

    async def emit(self, event_name: str, *args, **kwargs):
        """Emit an event to all listeners. Listener failures never reach the emitter."""
        for callback in self._listeners.get(event_name, [])[:]:
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(*args, **kwargs)
                else:
                    callback(*args, **kwargs)
            except Exception as e:
                logger.error("Error in event listener for %s: %s", event_name, e)
