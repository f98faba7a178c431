"""Errors surfaced by the ledger engine. Each one ends the triggering intent."""


class LedgerError(Exception):
    """Base class for ledger errors; messages are fit for the user."""


class LedgerValidationError(LedgerError):
    """The intent was rejected before anything was written."""


class UnknownStockItemError(LedgerValidationError):
    def __init__(self, item_name: str):
        self.item_name = item_name
        super().__init__(
            f'The item "{item_name}" is not in your stock inventory. '
            "Please add it to the Stock section first."
        )


class AuthorizationError(LedgerError):
    """Secret mismatch on a guarded action."""


class PersistenceError(LedgerError):
    """The store rejected a write; the intent was rolled back."""
