"""
Account Module

Accounts are plain balance holders owned by a Ledger. They never validate
anything: the Ledger checks every amount before calling credit() or
debit(). Callers outside the ledger only ever see AccountSnapshot copies.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account at one point in time"""
    account_id: int
    balance: int


class Account:
    """Client account holding a balance in cents"""
    
    __slots__ = ("_id", "_value")
    
    def __init__(self, account_id: int, value: int):
        self._id = account_id
        self._value = value
    
    def get_id(self) -> int:
        return self._id
    
    def get_value(self) -> int:
        return self._value
    
    def credit(self, amount: int) -> None:
        """Increase the balance. No upper bound is enforced."""
        self._value += amount
    
    def debit(self, amount: int) -> None:
        """Decrease the balance. The ledger guarantees amount <= balance."""
        self._value -= amount
    
    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(account_id=self._id, balance=self._value)
    
    def __repr__(self) -> str:
        return f"Account(id={self._id}, value={self._value})"
