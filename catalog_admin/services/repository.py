from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog_admin.services.list_query import QueryDescriptor
from catalog_admin.services.query_apply import apply_query_descriptor, apply_relations

T = TypeVar("T")

UNIQUE_VIOLATION = "unique"
FOREIGN_KEY_VIOLATION = "foreign_key"
CHECK_VIOLATION = "check"

_SQLSTATE_VIOLATIONS = {
    "23505": UNIQUE_VIOLATION,
    "23503": FOREIGN_KEY_VIOLATION,
    "23514": CHECK_VIOLATION,
}


def violated_constraint(exc: IntegrityError) -> str | None:
    """Which kind of constraint a failed commit tripped, if the driver says.

    PostgreSQL drivers expose the SQLSTATE; SQLite only has the message text.
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in _SQLSTATE_VIOLATIONS:
        return _SQLSTATE_VIOLATIONS[code]
    text = str(orig).lower()
    if "unique" in text or "duplicate key" in text:
        return UNIQUE_VIOLATION
    if "foreign key" in text:
        return FOREIGN_KEY_VIOLATION
    if "check constraint" in text:
        return CHECK_VIOLATION
    return None


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0


class Repository(Generic[T]):
    """find / find_one / count / save / delete over one mapped class.

    Relations are never loaded implicitly: callers name them through the
    descriptor or the ``with_`` argument.
    """

    def __init__(self, db: Session, model: type[T], *, sortable: tuple[str, ...] = ()):
        self.db = db
        self.model = model
        self.sortable = sortable

    def _query(self, descriptor: QueryDescriptor):
        return apply_query_descriptor(self.db.query(self.model), self.model, descriptor, sortable=self.sortable)

    def find(self, descriptor: QueryDescriptor) -> list[T]:
        return self._query(descriptor).offset(descriptor.skip).limit(descriptor.take).all()

    def count(self, descriptor: QueryDescriptor) -> int:
        return self._query(descriptor).order_by(None).count()

    def find_and_count(self, descriptor: QueryDescriptor) -> Page[T]:
        return Page(items=self.find(descriptor), total=self.count(descriptor))

    def _criteria(self, where: dict[str, Any]) -> list:
        # Explicit columns: filter_by() would target the last joined entity.
        return [getattr(self.model, key) == value for key, value in where.items()]

    def find_one(self, *, with_: Iterable[str] = (), **where: Any) -> T | None:
        q = apply_relations(self.db.query(self.model), self.model, set(with_))
        return q.filter(*self._criteria(where)).first()

    def find_by(self, *, with_: Iterable[str] = (), order_by: str | None = None, **where: Any) -> list[T]:
        q = apply_relations(self.db.query(self.model), self.model, set(with_)).filter(*self._criteria(where))
        if order_by:
            q = q.order_by(getattr(self.model, order_by), self.model.id)
        return q.all()

    def exists(self, **where: Any) -> bool:
        return self.db.query(self.model.id).filter_by(**where).first() is not None

    def count_by(self, **where: Any) -> int:
        return self.db.query(self.model).filter_by(**where).count()

    def save(self, row: T) -> T:
        try:
            self.db.add(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return row

    def delete(self, row: T) -> None:
        try:
            self.db.delete(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
