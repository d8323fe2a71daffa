"""
Currency Display Helpers

Balances and liquidity are integer cents everywhere in the ledger. This
module only turns them into text for display.
"""


def format_cents(cents: int) -> str:
    """
    Format an amount of cents as dollars and cents
    
    Negative amounts get a leading minus sign: -150 -> "-$1.50"
    """
    dollars, rem = divmod(abs(cents), 100)
    sign = "-" if cents < 0 else ""
    return f"{sign}${dollars}.{rem:02d}"
