# retail_pos/database/repositories/_integrity.py
from __future__ import annotations

import sqlite3

from ...errors import (
    ConstraintError,
    DuplicateBarcodeError,
    DuplicateNameError,
    InvalidReferenceError,
    ValidationError,
)


def translate_integrity_error(e: sqlite3.IntegrityError) -> Exception:
    """
    Map SQLite's constraint messages onto the named failures callers can
    show a targeted message for.
    """
    msg = str(e)
    if "UNIQUE constraint failed: products.barcode" in msg:
        return DuplicateBarcodeError("A product with this barcode already exists.", cause=e)
    if "UNIQUE constraint failed: categories.name" in msg:
        return DuplicateNameError("A category with this name already exists.", cause=e)
    if "FOREIGN KEY constraint failed" in msg:
        return InvalidReferenceError("Referenced record does not exist.", cause=e)
    if "CHECK constraint failed" in msg or "NOT NULL constraint failed" in msg:
        return ValidationError(f"Value rejected by the database: {msg}", cause=e)
    return ConstraintError(msg, cause=e)
