"""Domain errors surfaced by the stores"""
from typing import Optional


class StoreUnavailableError(Exception):
    """A backing store (Redis or the database) could not be read or written."""

    def __init__(self, store: str, operation: str, detail: Optional[str] = None):
        self.store = store
        self.operation = operation
        self.detail = detail
        message = f"Could not {operation} {store}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class QuoteVersionConflict(Exception):

    def __init__(self, quote_id: str, expected: int, actual: int):
        self.quote_id = quote_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Quote {quote_id} was modified concurrently (expected version {expected}, found {actual})"
        )
