"""In-memory chain: token ledger, permit verification, clock and atomic scope."""

from zapper.chain.ledger import LedgerError, TokenLedger
from zapper.chain.state import Chain, ManualClock, SystemClock

__all__ = ["Chain", "LedgerError", "ManualClock", "SystemClock", "TokenLedger"]
