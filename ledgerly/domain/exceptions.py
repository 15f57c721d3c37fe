"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input failed a business rule; `field` names the offending input"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainException):
    """Debt or account does not exist in the caller's scope"""

    pass


class AlreadySettledError(DomainException):
    """Operation requires an outstanding balance but the debt is settled"""

    pass


class OverpaymentError(DomainException):
    """Payment exceeds the outstanding balance of the targeted debts"""

    pass


class ConflictError(DomainException):
    """Debt changed concurrently and the conditional update lost the race"""

    pass


class TransactionServiceError(DomainException):
    """Transaction service returned an error or is unavailable"""

    pass


class AccountServiceError(DomainException):
    """Account service returned an error or is unavailable"""

    pass
