"""
Reporting Module

Read-only rendering of a ledger for display: a single account line, or a
statement of liquidity plus every account.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .accounts import AccountSnapshot
from .currency import format_cents
from .ledger import Ledger


@dataclass
class LedgerStatement:
    """Liquidity and account balances captured at one point in time"""
    liquidity: int
    accounts: List[AccountSnapshot] = field(default_factory=list)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    
    @property
    def total_deposits(self) -> int:
        """Sum of all client balances"""
        return sum(account.balance for account in self.accounts)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'liquidity': self.liquidity,
            'accounts': [
                {'account_id': a.account_id, 'balance': a.balance}
                for a in self.accounts
            ],
            'total_deposits': self.total_deposits,
            'generated_at': self.generated_at.isoformat()
        }


def format_account(snapshot: AccountSnapshot) -> str:
    """Render one account as "[id] - [$x.yy]" """
    return f"[{snapshot.account_id}] - [{format_cents(snapshot.balance)}]"


def render_account(ledger: Ledger, account_id: int) -> str:
    """
    Render a single account of the ledger
    
    Raises:
        LedgerError: If the account does not exist
    """
    snapshot = ledger.lookup(account_id).unwrap()
    return format_account(snapshot)


def build_statement(ledger: Ledger) -> LedgerStatement:
    liquidity, accounts = ledger.statement()
    return LedgerStatement(liquidity=liquidity, accounts=accounts)


def format_statement(statement: LedgerStatement) -> str:
    lines = [
        "Bank informations :",
        f"Liquidity : {format_cents(statement.liquidity)}",
    ]
    lines.extend(format_account(account) for account in statement.accounts)
    return "\n".join(lines)
