"""
Typed event bus for decoupled communication.

Uses Enums for event types to prevent magic strings. The host game
publishes its battle lifecycle notifications here and the reward
engine subscribes to them.

Notifications may be published from several host threads at once.
Handler lists are copied under a lock and handlers run outside it, so
a slow handler never blocks unrelated publishers.

Usage:
    # Define events
    class BattleEvent(Enum):
        BATTLE_STARTED = auto()
        BATTLE_VICTORY = auto()

    # Subscribe
    event_bus.subscribe(BattleEvent.BATTLE_VICTORY, on_victory)

    # Publish
    event_bus.publish(BattleEvent.BATTLE_VICTORY, battle_id=bid, winners=ids)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


# Core engine events
class EngineEvent(Enum):
    """Built-in engine events."""
    # Lifecycle
    ENGINE_STARTED = auto()
    ENGINE_STOPPED = auto()

    # Configuration
    CONFIG_RELOADED = auto()
    CONFIG_RELOAD_FAILED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Handlers called in subscription order
    - Weak references (auto-cleanup when handlers are deleted)
    - Safe to publish from multiple threads
    """

    def __init__(self):
        # Map of event type -> handler references
        self._handlers: dict[Enum, list[Any]] = {}
        self._lock = threading.RLock()
        # Per-thread queue for events published during handling
        self._local = threading.local()

    def subscribe(self, event_type: Enum, handler: EventHandler, weak: bool = True) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        if weak:
            if hasattr(handler, '__self__'):
                # Method - use WeakMethod
                handler_ref = WeakMethod(handler)
            else:
                # Function - use regular ref
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler_ref)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """
        Unsubscribe from an event type.

        Args:
            event_type: The event type
            handler: The handler to remove
        """
        with self._lock:
            if event_type not in self._handlers:
                return

            self._handlers[event_type] = [
                h for h in self._handlers[event_type]
                if self._get_handler(h) != handler
            ]

    def has_subscribers(self, event_type: Enum) -> bool:
        """Check whether anything listens for an event type."""
        with self._lock:
            return bool(self._handlers.get(event_type))

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The published Event object
        """
        event = Event(type=event_type, data=data)
        self.publish_event(event)
        return event

    def publish_event(self, event: Event) -> None:
        """
        Publish a pre-created event.

        Events published from inside a handler are queued and dispatched
        after the current event finishes, on the same thread.

        Args:
            event: The event to publish
        """
        if getattr(self._local, "publishing", False):
            self._local.queue.append(event)
            return

        self._local.publishing = True
        self._local.queue = []
        try:
            self._dispatch(event)

            # Process queued events
            while self._local.queue:
                queued = self._local.queue.pop(0)
                self._dispatch(queued)
        finally:
            self._local.publishing = False
            self._local.queue = []

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        with self._lock:
            if event_type is None:
                self._handlers.clear()
            elif event_type in self._handlers:
                del self._handlers[event_type]

    def _dispatch(self, event: Event) -> None:
        """Dispatch event to handlers."""
        with self._lock:
            handlers = list(self._handlers.get(event.type, ()))

        dead = []

        for handler_ref in handlers:
            handler = self._get_handler(handler_ref)

            if handler is None:
                # Weak reference was garbage collected
                dead.append(handler_ref)
                continue

            try:
                handler(event)
            except Exception:
                # Log but don't crash the publisher
                logger.exception("Error in event handler for %s", event.type)

        if dead:
            with self._lock:
                current = self._handlers.get(event.type)
                if current is not None:
                    self._handlers[event.type] = [
                        h for h in current
                        if not any(h is d for d in dead)
                    ]

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if callable(handler_ref) and not isinstance(handler_ref, (ref, WeakMethod)):
            # Strong reference
            return handler_ref

        # Weak reference
        return handler_ref()
