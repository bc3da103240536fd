# retail_pos/database/repositories/categories_repo.py
from __future__ import annotations

from dataclasses import dataclass
import sqlite3

from .. import Store, locked
from ._integrity import translate_integrity_error


@dataclass
class Category:
    category_id: int
    name: str


class CategoriesRepo:
    def __init__(self, store: Store):
        self.store = store

    @property
    def conn(self) -> sqlite3.Connection:
        return self.store.conn

    @locked
    def list_categories(self) -> list[Category]:
        rows = self.conn.execute(
            "SELECT category_id, name FROM categories ORDER BY name ASC"
        ).fetchall()
        return [Category(**r) for r in rows]

    def create(self, name: str) -> Category:
        """Raises DuplicateNameError when the name is taken (binary collation)."""
        try:
            with self.store.transaction() as conn:
                cur = conn.execute("INSERT INTO categories(name) VALUES (?)", (name,))
                return Category(category_id=int(cur.lastrowid), name=name)
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e) from e
