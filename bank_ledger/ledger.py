"""
Ledger Engine

The bank: owns its liquidity pool and every client account, and is the
only place either is mutated. Each operation validates its inputs in a
fixed order, then applies all balance changes in one step, so a rejected
operation leaves no trace. Rejections are returned as OperationResult
values carrying an ErrorKind, never raised.
"""

from threading import RLock
from typing import Dict, List, Optional, Tuple

from .accounts import Account, AccountSnapshot
from .config import get_config
from .events import EventDispatcher, create_ledger_event
from .logging_config import get_logger, log_action
from .results import ErrorKind, Operation, OperationResult



class Ledger:
    """
    In-memory ledger of client accounts and bank liquidity
    
    All amounts are integer cents. Opening an account and depositing both
    charge a fee of fee_percent (5 by default), truncated toward zero,
    which is added to liquidity. Loans move money from liquidity to an
    account and are capped by the liquidity available.
    """
    
    def __init__(
        self,
        liquidity: Optional[int] = None,
        fee_percent: Optional[int] = None,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        settings = get_config()
        if liquidity is None:
            liquidity = settings.default_liquidity
        if fee_percent is None:
            fee_percent = settings.fee_percent
        if not 0 <= fee_percent <= 100:
            raise ValueError(f"Fee percent must be between 0 and 100, got {fee_percent}")
        
        self._liquidity = liquidity
        self._fee_percent = fee_percent
        self._accounts: Dict[int, Account] = {}
        self._lock = RLock()
        self.logger = get_logger("bank_ledger.ledger")
        
        # Events are published only when enabled in configuration
        self._event_dispatcher = event_dispatcher if settings.enable_events else None
        
        log_action(
            self.logger, "info", "Ledger created",
            action="create_ledger",
            extra={"liquidity": liquidity, "fee_percent": fee_percent}
        )
    
    @property
    def liquidity(self) -> int:
        return self._liquidity
    
    @property
    def fee_percent(self) -> int:
        return self._fee_percent
    
    def get_liquidity(self) -> int:
        """Current bank liquidity in cents"""
        return self._liquidity
    
    def compute_fee(self, amount: int) -> int:
        """Fee charged on an opening amount or deposit: amount * fee_percent // 100"""
        return amount * self._fee_percent // 100
    
    @staticmethod
    def is_amount_valid(amount) -> bool:
        """Amounts must be strictly positive integers (bools are rejected)"""
        return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0

    @staticmethod
    def is_id_valid(account_id) -> bool:
        """Account ids must be integers (bools are rejected)"""
        return isinstance(account_id, int) and not isinstance(account_id, bool)

    def create_account(self, account_id: int, initial_amount: int) -> OperationResult:
        """
        Open an account funded with initial_amount minus the fee

        Fails with INVALID_AMOUNT, then INVALID_ACCOUNT_ID, then DUPLICATE_ACCOUNT.
        """
        op = Operation.CREATE_ACCOUNT
        with self._lock:
            if not self.is_amount_valid(initial_amount):
                return self._reject(op, account_id, initial_amount, ErrorKind.INVALID_AMOUNT,
                                    "The initial amount must be positive")
            if not self.is_id_valid(account_id):
                return self._reject_id(op, account_id, initial_amount)
            if account_id in self._accounts:
                return self._reject(op, account_id, initial_amount, ErrorKind.DUPLICATE_ACCOUNT,
                                    f"Account {account_id} already exists")
            
            fee = self.compute_fee(initial_amount)
            liquidity_before = self._liquidity
            self._liquidity += fee
            account = Account(account_id, initial_amount - fee)
            self._accounts[account_id] = account
            
            return self._complete(OperationResult(
                operation=op,
                account_id=account_id,
                amount=initial_amount,
                fee=fee,
                account=account.snapshot(),
                balance_before=0,
                balance_after=account.get_value(),
                liquidity_before=liquidity_before,
                liquidity_after=self._liquidity,
                message=f"Account {account_id} created"
            ))
    
    def remove_account(self, account_id: int) -> OperationResult:
        """
        Close an account. A non-integer id fails with INVALID_ACCOUNT_ID.
        Removing an id that is not present fails with ACCOUNT_NOT_FOUND,
        including a second removal of the same id.
        """
        op = Operation.REMOVE_ACCOUNT
        with self._lock:
            if not self.is_id_valid(account_id):
                return self._reject_id(op, account_id, 0)
            account = self._accounts.pop(account_id, None)
            if account is None:
                return self._reject(op, account_id, 0, ErrorKind.ACCOUNT_NOT_FOUND,
                                    f"Account {account_id} not found")
            
            snapshot = account.snapshot()
            return self._complete(OperationResult(
                operation=op,
                account_id=account_id,
                account=snapshot,
                balance_before=snapshot.balance,
                balance_after=None,
                liquidity_before=self._liquidity,
                liquidity_after=self._liquidity,
                message=f"Account {account_id} removed"
            ))
    
    def deposit_to_account(self, account_id: int, amount: int) -> OperationResult:
        """
        Deposit amount minus the fee; the fee goes to liquidity
        
        Fails with INVALID_AMOUNT, then INVALID_ACCOUNT_ID, then ACCOUNT_NOT_FOUND.
        """
        op = Operation.DEPOSIT
        with self._lock:
            if not self.is_amount_valid(amount):
                return self._reject(op, account_id, amount, ErrorKind.INVALID_AMOUNT,
                                    "The deposit amount must be positive")
            if not self.is_id_valid(account_id):
                return self._reject_id(op, account_id, amount)
            account = self._accounts.get(account_id)
            if account is None:
                return self._reject(op, account_id, amount, ErrorKind.ACCOUNT_NOT_FOUND,
                                    f"Account {account_id} not found")
            
            fee = self.compute_fee(amount)
            balance_before = account.get_value()
            liquidity_before = self._liquidity
            self._liquidity += fee
            account.credit(amount - fee)
            
            return self._complete(OperationResult(
                operation=op,
                account_id=account_id,
                amount=amount,
                fee=fee,
                account=account.snapshot(),
                balance_before=balance_before,
                balance_after=account.get_value(),
                liquidity_before=liquidity_before,
                liquidity_after=self._liquidity,
                message=f"Deposit to account {account_id} completed"
            ))
    
    def withdraw_from_account(self, account_id: int, amount: int) -> OperationResult:
        """
        Withdraw amount with no fee
        
        Fails with INVALID_AMOUNT, then INVALID_ACCOUNT_ID, then ACCOUNT_NOT_FOUND,
        then INSUFFICIENT_BALANCE.
        """
        op = Operation.WITHDRAW
        with self._lock:
            if not self.is_amount_valid(amount):
                return self._reject(op, account_id, amount, ErrorKind.INVALID_AMOUNT,
                                    "The withdrawal amount must be positive")
            if not self.is_id_valid(account_id):
                return self._reject_id(op, account_id, amount)
            account = self._accounts.get(account_id)
            if account is None:
                return self._reject(op, account_id, amount, ErrorKind.ACCOUNT_NOT_FOUND,
                                    f"Account {account_id} not found")
            if account.get_value() < amount:
                return self._reject(op, account_id, amount, ErrorKind.INSUFFICIENT_BALANCE,
                                    f"Account {account_id} has insufficient balance")
            
            balance_before = account.get_value()
            account.debit(amount)
            
            return self._complete(OperationResult(
                operation=op,
                account_id=account_id,
                amount=amount,
                account=account.snapshot(),
                balance_before=balance_before,
                balance_after=account.get_value(),
                liquidity_before=self._liquidity,
                liquidity_after=self._liquidity,
                message=f"Withdrawal from account {account_id} completed"
            ))
    
    def give_loan(self, account_id: int, amount: int) -> OperationResult:
        """
        Lend amount from liquidity to an account
        
        Fails with INVALID_AMOUNT, then INSUFFICIENT_LIQUIDITY, then
        INVALID_ACCOUNT_ID, then ACCOUNT_NOT_FOUND. Liquidity is checked before
        the account lookup.
        """
        op = Operation.LOAN
        with self._lock:
            if not self.is_amount_valid(amount):
                return self._reject(op, account_id, amount, ErrorKind.INVALID_AMOUNT,
                                    "The loan amount must be positive")
            if self._liquidity < amount:
                return self._reject(op, account_id, amount, ErrorKind.INSUFFICIENT_LIQUIDITY,
                                    "The bank has insufficient liquidity")
            if not self.is_id_valid(account_id):
                return self._reject_id(op, account_id, amount)
            account = self._accounts.get(account_id)
            if account is None:
                return self._reject(op, account_id, amount, ErrorKind.ACCOUNT_NOT_FOUND,
                                    f"Account {account_id} not found")
            
            balance_before = account.get_value()
            liquidity_before = self._liquidity
            account.credit(amount)
            self._liquidity -= amount
            
            return self._complete(OperationResult(
                operation=op,
                account_id=account_id,
                amount=amount,
                account=account.snapshot(),
                balance_before=balance_before,
                balance_after=account.get_value(),
                liquidity_before=liquidity_before,
                liquidity_after=self._liquidity,
                message=f"Loan to account {account_id} granted"
            ))
    
    def lookup(self, account_id: int) -> OperationResult:
        """Read-only lookup of one account"""
        with self._lock:
            if not self.is_id_valid(account_id):
                error, message = ErrorKind.INVALID_ACCOUNT_ID, _invalid_id_message(account_id)
            else:
                error, message = ErrorKind.ACCOUNT_NOT_FOUND, f"Account {account_id} not found"
            account = self._accounts.get(account_id) if error is ErrorKind.ACCOUNT_NOT_FOUND else None
            if account is None:
                return OperationResult(
                    operation=Operation.LOOKUP,
                    account_id=account_id,
                    error=error,
                    message=message,
                    liquidity_before=self._liquidity,
                    liquidity_after=self._liquidity
                )
            balance = account.get_value()
            return OperationResult(
                operation=Operation.LOOKUP,
                account_id=account_id,
                account=account.snapshot(),
                balance_before=balance,
                balance_after=balance,
                liquidity_before=self._liquidity,
                liquidity_after=self._liquidity
            )
    
    def accounts(self) -> List[AccountSnapshot]:
        """Snapshots of every account, in creation order"""
        with self._lock:
            return [account.snapshot() for account in self._accounts.values()]
    
    def statement(self) -> Tuple[int, List[AccountSnapshot]]:
        """Liquidity and every account snapshot, captured together"""
        with self._lock:
            return self._liquidity, self.accounts()
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
    
    def __contains__(self, account_id) -> bool:
        if not self.is_id_valid(account_id):
            return False
        with self._lock:
            return account_id in self._accounts
    
    def __repr__(self) -> str:
        return f"Ledger(liquidity={self._liquidity}, accounts={len(self._accounts)})"
    
    def _reject(
        self,
        operation: Operation,
        account_id: int,
        amount,
        kind: ErrorKind,
        message: str
    ) -> OperationResult:
        """Build a failure result reflecting the untouched state"""
        account = self._accounts.get(account_id) if self.is_id_valid(account_id) else None
        balance = account.get_value() if account is not None else None
        return self._complete(OperationResult(
            operation=operation,
            account_id=account_id,
            amount=amount,
            error=kind,
            message=message,
            account=account.snapshot() if account is not None else None,
            balance_before=balance,
            balance_after=balance,
            liquidity_before=self._liquidity,
            liquidity_after=self._liquidity
        ))
    
    def _reject_id(self, operation: Operation, account_id, amount) -> OperationResult:
        return self._reject(operation, account_id, amount, ErrorKind.INVALID_ACCOUNT_ID,
                            _invalid_id_message(account_id))
    
    def _complete(self, result: OperationResult) -> OperationResult:
        """Log and publish a finished operation"""
        log_action(
            self.logger, "info" if result.ok else "warning", result.message,
            action=result.operation.value,
            resource=f"account:{result.account_id}",
            extra=result.to_dict()
        )
        
        if self._event_dispatcher:
            self._event_dispatcher.publish(create_ledger_event(result))
        
        return result


def _invalid_id_message(account_id) -> str:
    return f"Account id must be an integer, got {account_id!r}"
