"""Event records emitted by committed wallet actions.

Example:
    log = EventLog()
    log.subscribe("ActionExecuted", lambda event: print(event.to_dict()))
    log.subscribe("*", audit_handler)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionExecuted:
    """A transaction was authorized and its invocation succeeded."""
    name: ClassVar[str] = "ActionExecuted"

    target: str
    value: int
    payload: bytes
    nonce: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "target": self.target,
            "value": self.value,
            "payload": "0x" + self.payload.hex(),
            "nonce": self.nonce,
        }


@dataclass(frozen=True)
class SignersUpdated:
    """The signer set and threshold were replaced."""
    name: ClassVar[str] = "SignersUpdated"

    signers: Tuple[str, ...]
    threshold: int
    nonce: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "signers": list(self.signers),
            "threshold": self.threshold,
            "nonce": self.nonce,
        }


WalletEvent = Union[ActionExecuted, SignersUpdated]
EventHandler = Callable[[WalletEvent], Any]


@dataclass
class EventLog:
    """Ordered record of emitted events with synchronous subscribers.

    Handlers run after the action has committed. A handler that raises is
    logged and skipped; it cannot roll the action back.
    """

    _events: List[WalletEvent] = field(default_factory=list)
    _subscribers: Dict[str, List[EventHandler]] = field(default_factory=dict)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Subscribe to one event name, or ``"*"`` for all events."""
        handlers = self._subscribers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self._subscribers[event_name]

    def emit(self, event: WalletEvent) -> None:
        self._events.append(event)
        logger.info("Emitted %s", event.name, extra={"event": event.to_dict()})

        for pattern in (event.name, "*"):
            for handler in list(self._subscribers.get(pattern, [])):
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Event handler %r failed for %s", handler, event.name
                    )

    @property
    def events(self) -> List[WalletEvent]:
        return list(self._events)

    def of_type(self, event_name: str) -> List[WalletEvent]:
        return [e for e in self._events if e.name == event_name]

    def __len__(self) -> int:
        return len(self._events)
