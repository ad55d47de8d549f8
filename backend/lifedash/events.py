"""
Document Change Publisher

In-process fan-out of document changes for live subscriptions.
Stores publish after every successful write; API endpoints stream the
changes to clients as Server-Sent Events (SSE).
"""
import asyncio
import json
import logging
from datetime import datetime
from typing import Dict, Optional, AsyncGenerator
from dataclasses import dataclass, asdict
from enum import Enum

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """Kinds of document changes."""
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class DocumentEvent:
    """A change to a single document, as seen by subscribers."""
    change_type: str
    path: str
    data: Optional[Dict] = None  # Full document after the write; None on delete
    timestamp: str = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.utcnow().isoformat()

    def to_sse(self) -> str:
        """Format as SSE data line."""
        payload = asdict(self)
        return f"data: {json.dumps(payload, default=str)}\n\n"


class EventPublisher:
    """
    Manages per-document subscriber queues.

    Usage:
        publisher = EventPublisher()

        # In a store - publish after a write
        await publisher.publish("shareProjects/abc", ChangeType.UPDATE, data)

        # In an API endpoint - follow a document
        async for event in publisher.subscribe("shareProjects/abc"):
            yield event.to_sse()
    """

    def __init__(self):
        # document path -> list of subscriber queues
        self._subscribers: Dict[str, list] = {}
        self._lock = asyncio.Lock()

    async def register(self, path: str) -> asyncio.Queue:
        """Start buffering changes of one document for a later listen()."""
        queue = asyncio.Queue()
        async with self._lock:
            if path not in self._subscribers:
                self._subscribers[path] = []
            self._subscribers[path].append(queue)
        return queue

    async def unregister(self, path: str, queue: asyncio.Queue):
        async with self._lock:
            if path in self._subscribers and queue in self._subscribers[path]:
                self._subscribers[path].remove(queue)
                if not self._subscribers[path]:
                    del self._subscribers[path]

    async def listen(self, path: str, queue: asyncio.Queue) -> AsyncGenerator[DocumentEvent, None]:
        """Drain a registered queue until shutdown or deletion of the document."""
        try:
            while True:
                event = await queue.get()
                if event is None:  # Shutdown signal
                    break
                yield event
                if event.change_type == ChangeType.DELETE.value:
                    break
        finally:
            await self.unregister(path, queue)

    async def subscribe(self, path: str) -> AsyncGenerator[DocumentEvent, None]:
        """Subscribe to changes of one document."""
        queue = await self.register(path)
        async for event in self.listen(path, queue):
            yield event

    async def publish(
        self,
        path: str,
        change_type: ChangeType,
        data: Optional[Dict] = None,
    ):
        """Publish a change to all subscribers of a document."""
        event = DocumentEvent(
            change_type=change_type.value,
            path=path,
            data=data,
        )

        async with self._lock:
            subscribers = list(self._subscribers.get(path, []))
            for queue in subscribers:
                await queue.put(event)

        logger.debug(f"Published {change_type.value} of {path} to {len(subscribers)} subscribers")

    def subscriber_count(self, path: str) -> int:
        """Number of live subscribers for a document."""
        return len(self._subscribers.get(path, []))

    async def close_all(self, path: Optional[str] = None):
        """Close subscriber connections for one document, or for all documents."""
        async with self._lock:
            if path is None:
                queues = [q for subs in self._subscribers.values() for q in subs]
            else:
                queues = list(self._subscribers.get(path, []))
            for queue in queues:
                await queue.put(None)


# Global publisher instance
_publisher: Optional[EventPublisher] = None


def get_event_publisher() -> EventPublisher:
    """Get or create the global event publisher."""
    global _publisher
    if _publisher is None:
        _publisher = EventPublisher()
    return _publisher
