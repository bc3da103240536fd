# retail_pos/errors.py
"""
Error taxonomy shared by repositories, controllers and the command surface.

- ValidationError:      bad input, rejected before the store is touched.
- ConstraintError:      expected store constraint violations (duplicates, FKs).
- NotFoundError:        an id that does not address a row.
- TransactionError:     a multi-step write failed and was rolled back.
- StoreUnavailableError: the database cannot be opened or migrated (fatal).
- ReceiptError:         receipt rendering failed; never undoes a sale.
"""
from __future__ import annotations


class DomainError(Exception):
    """Domain-level error the caller can surface directly (toast/snackbar)."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(DomainError):
    pass


# ---------------- Constraint violations ----------------

class ConstraintError(DomainError):
    pass


class DuplicateNameError(ConstraintError):
    pass


class DuplicateBarcodeError(ConstraintError):
    pass


class InvalidReferenceError(ConstraintError):
    pass


# ---------------- Missing rows ----------------

class NotFoundError(DomainError):
    pass


class ProductNotFoundError(NotFoundError):
    pass


class SaleNotFoundError(NotFoundError):
    pass


# ---------------- Transactional failures ----------------

class TransactionError(DomainError):
    pass


class SaleRegistrationError(TransactionError):
    pass


class SaleCancellationError(TransactionError):
    pass


class PurgeError(TransactionError):
    pass


# ---------------- Outside the domain ----------------

class StoreUnavailableError(Exception):
    """The local database could not be opened or migrated. Not recoverable in-session."""


class ReceiptError(Exception):
    """Receipt rendering or writing failed."""
