"""
Tx - Transaction lifecycle tracking.

Submits contract transactions through a wallet, polls the node until they
finalize and classifies the outcome.
"""


class TransactionStateError(RuntimeError):
    """Raised when a submitter transition is invoked from the wrong state."""
