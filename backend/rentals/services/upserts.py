# backend/rentals/services/upserts.py
from __future__ import annotations

from typing import Any, Mapping, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

T = TypeVar("T")


def _insert_for(db: Session):
    name = db.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert
    if name == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"upsert not supported on dialect {name}")


def upsert_row(
    db: Session,
    model: Type[T],
    *,
    key: Mapping[str, Any],
    values: Mapping[str, Any],
    update_set: Mapping[str, Any] | None = None,
) -> T:
    """
    INSERT ... ON CONFLICT (key columns) DO UPDATE, then re-read the row.

    ``values`` seeds the insert (key columns are added automatically).
    ``update_set`` defaults to ``values``; pass SQL expressions there when the
    update needs to see the existing row (e.g. CASE on the old column).
    Does NOT commit.
    """
    insert = _insert_for(db)
    stmt = insert(model).values({**values, **key})
    stmt = stmt.on_conflict_do_update(
        index_elements=list(key.keys()),
        set_=dict(update_set if update_set is not None else values),
    )
    db.execute(stmt)

    conds: Sequence[Any] = [getattr(model, k) == v for k, v in key.items()]
    row = db.scalar(select(model).where(*conds).execution_options(populate_existing=True))
    if row is None:
        raise RuntimeError(f"upserted {model.__name__} row not found for {dict(key)}")
    return row
