"""Read-only aggregate queries."""

from donation_kernel.selectors.ledger_selector import LedgerSelector

__all__ = ["LedgerSelector"]
