"""
Bank Ledger

An in-memory ledger: a bank owning its liquidity and a set of client
accounts, with fee-charging deposits, withdrawals, and loans capped by
liquidity. All amounts are integer cents.
"""

from .accounts import AccountSnapshot
from .events import EventDispatcher, EventPayload, LedgerEvent
from .ledger import Ledger
from .results import ErrorKind, LedgerError, Operation, OperationResult

__version__ = "1.0.0"

__all__ = [
    "AccountSnapshot",
    "ErrorKind",
    "EventDispatcher",
    "EventPayload",
    "Ledger",
    "LedgerError",
    "LedgerEvent",
    "Operation",
    "OperationResult",
]
