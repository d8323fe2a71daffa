"""
Tests for the Event System (Observer Pattern)

Tests the event dispatcher and the events a ledger publishes.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest

from bank_ledger.events import (
    EventDispatcher, EventPayload, LedgerEvent, create_ledger_event
)
from bank_ledger.ledger import Ledger
from bank_ledger.results import ErrorKind, Operation, OperationResult


class TestEventPayload:
    """Test EventPayload creation and serialization"""
    
    def test_event_payload_creation(self):
        event = EventPayload(
            event_type=LedgerEvent.DEPOSIT_COMPLETED,
            account_id=0,
            data={"amount": 10000, "fee": 500}
        )
        
        assert event.event_type == LedgerEvent.DEPOSIT_COMPLETED
        assert event.account_id == 0
        assert event.data["fee"] == 500
        assert isinstance(event.timestamp, datetime)
        assert len(event.event_id) > 0
    
    def test_event_payload_serialization(self):
        """Test event payload to/from dict"""
        original = EventPayload(
            event_type=LedgerEvent.ACCOUNT_CREATED,
            account_id=3,
            data={"balance_after": 95}
        )
        
        event_dict = original.to_dict()
        assert event_dict['event_type'] == "account.created"
        assert event_dict['account_id'] == 3
        
        restored = EventPayload.from_dict(event_dict)
        assert restored.event_type == original.event_type
        assert restored.account_id == original.account_id
        assert restored.data == original.data
        assert restored.timestamp == original.timestamp
        assert restored.event_id == original.event_id


class TestCreateLedgerEvent:
    """Test mapping of results to events"""
    
    @pytest.mark.parametrize("operation, event_type", [
        (Operation.CREATE_ACCOUNT, LedgerEvent.ACCOUNT_CREATED),
        (Operation.REMOVE_ACCOUNT, LedgerEvent.ACCOUNT_REMOVED),
        (Operation.DEPOSIT, LedgerEvent.DEPOSIT_COMPLETED),
        (Operation.WITHDRAW, LedgerEvent.WITHDRAWAL_COMPLETED),
        (Operation.LOAN, LedgerEvent.LOAN_GRANTED),
    ])
    def test_success_events(self, operation, event_type):
        result = OperationResult(operation=operation, account_id=1)
        assert create_ledger_event(result).event_type == event_type
    
    def test_rejection_event(self):
        result = OperationResult(
            operation=Operation.LOAN,
            account_id=1,
            error=ErrorKind.INSUFFICIENT_LIQUIDITY
        )
        
        event = create_ledger_event(result)
        
        assert event.event_type == LedgerEvent.OPERATION_REJECTED
        assert event.data['error'] == "insufficient_liquidity"


class TestEventDispatcher:
    """Test EventDispatcher functionality"""
    
    def test_subscribe_and_publish(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.LOAN_GRANTED, handler)
        
        event = EventPayload(event_type=LedgerEvent.LOAN_GRANTED, account_id=0, data={})
        dispatcher.publish(event)
        
        handler.assert_called_once_with(event)
    
    def test_handler_only_receives_its_event_type(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.LOAN_GRANTED, handler)
        
        dispatcher.publish(EventPayload(event_type=LedgerEvent.DEPOSIT_COMPLETED, account_id=0, data={}))
        
        handler.assert_not_called()
    
    def test_global_handler(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe_all(handler)
        
        dispatcher.publish(EventPayload(event_type=LedgerEvent.ACCOUNT_REMOVED, account_id=0, data={}))
        dispatcher.publish(EventPayload(event_type=LedgerEvent.LOAN_GRANTED, account_id=0, data={}))
        
        assert handler.call_count == 2
    
    def test_unsubscribe(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.LOAN_GRANTED, handler)
        dispatcher.subscribe_all(handler)
        assert dispatcher.get_handler_count() == 2
        
        dispatcher.unsubscribe(LedgerEvent.LOAN_GRANTED, handler)
        dispatcher.unsubscribe_all(handler)
        
        assert dispatcher.get_handler_count() == 0
        assert dispatcher.get_handler_count(LedgerEvent.LOAN_GRANTED) == 0
    
    def test_unsubscribe_unknown_handler_is_harmless(self):
        dispatcher = EventDispatcher()
        dispatcher.unsubscribe(LedgerEvent.LOAN_GRANTED, Mock())
        dispatcher.unsubscribe_all(Mock())
        assert dispatcher.get_handler_count() == 0
    
    def test_failing_handler_does_not_stop_others(self):
        dispatcher = EventDispatcher()
        failing = Mock(side_effect=RuntimeError("boom"))
        working = Mock()
        dispatcher.subscribe(LedgerEvent.LOAN_GRANTED, failing)
        dispatcher.subscribe(LedgerEvent.LOAN_GRANTED, working)
        
        dispatcher.publish(EventPayload(event_type=LedgerEvent.LOAN_GRANTED, account_id=0, data={}))
        
        failing.assert_called_once()
        working.assert_called_once()
    
    def test_clear(self):
        dispatcher = EventDispatcher()
        dispatcher.subscribe(LedgerEvent.LOAN_GRANTED, Mock())
        dispatcher.subscribe_all(Mock())
        
        dispatcher.clear()
        
        assert dispatcher.get_handler_count() == 0


class TestLedgerEvents:
    """Test events published by a ledger"""
    
    def test_deposit_event_reports_balances(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.DEPOSIT_COMPLETED, handler)
        ledger = Ledger(100000, event_dispatcher=dispatcher)
        ledger.create_account(0, 10000)
        
        ledger.deposit_to_account(0, 10000)
        
        event = handler.call_args[0][0]
        assert event.account_id == 0
        assert event.data['balance_before'] == 9500
        assert event.data['balance_after'] == 19000
        assert event.data['liquidity_before'] == 100500
        assert event.data['liquidity_after'] == 101000
    
    def test_rejection_published(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.OPERATION_REJECTED, handler)
        ledger = Ledger(100, event_dispatcher=dispatcher)
        
        ledger.give_loan(0, 500)
        
        event = handler.call_args[0][0]
        assert event.data['operation'] == "loan"
        assert event.data['error'] == "insufficient_liquidity"
    
    def test_lookup_publishes_nothing(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe_all(handler)
        ledger = Ledger(100, event_dispatcher=dispatcher)
        
        ledger.lookup(0)
        
        handler.assert_not_called()
    
    def test_failing_handler_does_not_affect_ledger(self):
        dispatcher = EventDispatcher()
        dispatcher.subscribe_all(Mock(side_effect=RuntimeError("boom")))
        ledger = Ledger(100000, event_dispatcher=dispatcher)
        
        result = ledger.create_account(0, 10000)
        
        assert result.ok
        assert ledger.lookup(0).account.balance == 9500
