"""
Event System Module

Publish/subscribe dispatcher for ledger events. Every successful or
rejected operation is published with the balances and liquidity before
and after it, so subscribers can report movements without touching
the ledger.
"""

from enum import Enum
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid
import logging
from threading import RLock

from .results import Operation, OperationResult


class LedgerEvent(Enum):
    """Events emitted by a ledger"""
    
    ACCOUNT_CREATED = "account.created"
    ACCOUNT_REMOVED = "account.removed"
    DEPOSIT_COMPLETED = "deposit.completed"
    WITHDRAWAL_COMPLETED = "withdrawal.completed"
    LOAN_GRANTED = "loan.granted"
    OPERATION_REJECTED = "operation.rejected"


_SUCCESS_EVENTS = {
    Operation.CREATE_ACCOUNT: LedgerEvent.ACCOUNT_CREATED,
    Operation.REMOVE_ACCOUNT: LedgerEvent.ACCOUNT_REMOVED,
    Operation.DEPOSIT: LedgerEvent.DEPOSIT_COMPLETED,
    Operation.WITHDRAW: LedgerEvent.WITHDRAWAL_COMPLETED,
    Operation.LOAN: LedgerEvent.LOAN_GRANTED,
}


@dataclass
class EventPayload:
    """Payload for ledger events"""
    event_type: LedgerEvent
    account_id: int
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'event_type': self.event_type.value,
            'account_id': self.account_id,
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
            'event_id': self.event_id
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventPayload':
        """Create from dictionary"""
        return cls(
            event_type=LedgerEvent(data['event_type']),
            account_id=data['account_id'],
            data=data['data'],
            timestamp=datetime.fromisoformat(data['timestamp']) if isinstance(data['timestamp'], str) else data['timestamp'],
            event_id=data['event_id']
        )


class EventDispatcher:
    """Central event dispatcher, publish/subscribe pattern"""
    
    def __init__(self):
        self._handlers: Dict[LedgerEvent, List[Callable]] = {}
        self._global_handlers: List[Callable] = []  # catch-all handlers
        self._lock = RLock()
        self.logger = logging.getLogger("bank_ledger.events")
    
    def subscribe(self, event_type: LedgerEvent, handler: Callable) -> None:
        """Subscribe to a specific event type"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            self.logger.debug(f"Subscribed handler {_handler_name(handler)} to {event_type.value}")
    
    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to ALL events"""
        with self._lock:
            self._global_handlers.append(handler)
            self.logger.debug(f"Subscribed global handler {_handler_name(handler)}")
    
    def unsubscribe(self, event_type: LedgerEvent, handler: Callable) -> None:
        """Unsubscribe from a specific event type"""
        with self._lock:
            try:
                self._handlers.get(event_type, []).remove(handler)
                self.logger.debug(f"Unsubscribed handler {_handler_name(handler)} from {event_type.value}")
            except ValueError:
                self.logger.warning(f"Handler {_handler_name(handler)} was not subscribed to {event_type.value}")
    
    def unsubscribe_all(self, handler: Callable) -> None:
        """Unsubscribe a global handler"""
        with self._lock:
            try:
                self._global_handlers.remove(handler)
                self.logger.debug(f"Unsubscribed global handler {_handler_name(handler)}")
            except ValueError:
                self.logger.warning(f"Global handler {_handler_name(handler)} was not subscribed")
    
    def publish(self, event: EventPayload) -> None:
        """Publish event to all subscribers"""
        with self._lock:
            self.logger.debug(f"Publishing event {event.event_type.value} for account:{event.account_id}")
            
            handlers = self._handlers.get(event.event_type, []) + self._global_handlers
            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    # Handler failures never reach the ledger operation
                    self.logger.error(f"Error in event handler {_handler_name(handler)} for {event.event_type.value}: {e}")
    
    def clear(self) -> None:
        """Clear all handlers"""
        with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()
            self.logger.info("All event handlers cleared")
    
    def get_handler_count(self, event_type: Optional[LedgerEvent] = None) -> int:
        """Get count of handlers for a specific event type or all"""
        with self._lock:
            if event_type:
                return len(self._handlers.get(event_type, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__name__", repr(handler))


def create_ledger_event(result: OperationResult) -> EventPayload:
    """Build the event describing an operation result"""
    if result.ok:
        event_type = _SUCCESS_EVENTS[result.operation]
    else:
        event_type = LedgerEvent.OPERATION_REJECTED
    return EventPayload(
        event_type=event_type,
        account_id=result.account_id,
        data=result.to_dict()
    )
