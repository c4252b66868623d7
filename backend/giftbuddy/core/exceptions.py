"""
Ledger error taxonomy.

Every rejected operation raises one of these with a reason string the
presentation layer can show as-is.
"""
from typing import Optional


class LedgerError(Exception):
    """Base class for rejected ledger operations."""
    code = "ledger_error"
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AuthorizationError(LedgerError):
    """Caller lacks the admin role or ownership required for a mutation."""
    code = "forbidden"
    status_code = 403


class LedgerValidationError(LedgerError):
    """Input rejected before any write."""
    code = "invalid"
    status_code = 400


class NotFoundError(LedgerError):
    """Referenced event, gift, contribution or user does not exist."""
    code = "not_found"
    status_code = 404


class StorageError(LedgerError):
    """Persistence failure, tagged with the table and operation involved."""
    code = "storage_error"
    status_code = 500

    def __init__(self, table: str, operation: str, detail: Optional[str] = None):
        reason = f"Storage failure during {operation} on {table}"
        if detail:
            reason = f"{reason}: {detail}"
        super().__init__(reason)
        self.table = table
        self.operation = operation
