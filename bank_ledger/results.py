"""
Operation Results Module

Every ledger operation returns an OperationResult instead of raising.
A failed result names its ErrorKind; callers branch on it, log it, or
call unwrap() to turn it into a LedgerError.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .accounts import AccountSnapshot


class ErrorKind(Enum):
    """Reasons a ledger operation can be rejected"""
    INVALID_AMOUNT = "invalid_amount"                  # Amount not strictly positive
    INVALID_ACCOUNT_ID = "invalid_account_id"          # Id is not an integer
    DUPLICATE_ACCOUNT = "duplicate_account"            # Id already in the ledger
    ACCOUNT_NOT_FOUND = "account_not_found"            # Id not in the ledger
    INSUFFICIENT_BALANCE = "insufficient_balance"      # Withdrawal exceeds balance
    INSUFFICIENT_LIQUIDITY = "insufficient_liquidity"  # Loan exceeds bank liquidity


class Operation(Enum):
    """Ledger operations"""
    CREATE_ACCOUNT = "create_account"
    REMOVE_ACCOUNT = "remove_account"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    LOAN = "loan"
    LOOKUP = "lookup"


class LedgerError(Exception):
    """Raised by OperationResult.unwrap() for a failed operation"""
    
    def __init__(self, kind: ErrorKind, message: str, account_id: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.account_id = account_id


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of one ledger operation
    
    Balances and liquidity are recorded before and after the operation so
    callers can report the movement. On failure nothing was applied, so
    the before and after values are equal.
    """
    operation: Operation
    account_id: int
    amount: int = 0
    fee: int = 0
    error: Optional[ErrorKind] = None
    message: str = ""
    account: Optional[AccountSnapshot] = None
    balance_before: Optional[int] = None
    balance_after: Optional[int] = None
    liquidity_before: int = 0
    liquidity_after: int = 0
    
    @property
    def ok(self) -> bool:
        """Check if the operation succeeded"""
        return self.error is None
    
    def __bool__(self) -> bool:
        return self.ok
    
    def unwrap(self) -> Optional[AccountSnapshot]:
        """Return the account snapshot, raising LedgerError if the operation failed"""
        if self.error is not None:
            raise LedgerError(self.error, self.message, self.account_id)
        return self.account
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and events"""
        return {
            'operation': self.operation.value,
            'account_id': self.account_id,
            'amount': self.amount,
            'fee': self.fee,
            'error': self.error.value if self.error else None,
            'message': self.message,
            'balance_before': self.balance_before,
            'balance_after': self.balance_after,
            'liquidity_before': self.liquidity_before,
            'liquidity_after': self.liquidity_after,
        }
