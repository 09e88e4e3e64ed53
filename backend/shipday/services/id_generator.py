"""
Sequential human-readable identifiers — ORD001, DRV001, SHP001.
- Increments the numeric suffix of the most recently inserted row.
- No locking: concurrent creators may compute the same value. The unique
  constraint on the id column plus insert_with_fresh_id() retries cover that.
"""

import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shipday.errors import DuplicateIdError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_DIGITS = 3


def next_id(prefix: str, latest: str | None) -> str:
    """Return the identifier following `latest` (ORD001 -> ORD002, ORD999 -> ORD1000)."""
    if not latest or not latest.startswith(prefix):
        return f"{prefix}{1:0{MIN_DIGITS}d}"

    suffix = latest[len(prefix):]
    if not suffix.isdigit():
        return f"{prefix}{1:0{MIN_DIGITS}d}"

    return f"{prefix}{int(suffix) + 1:0{MIN_DIGITS}d}"


def _suffix(prefix: str, value: str) -> int:
    tail = value[len(prefix):]
    return int(tail) if tail.isdigit() else 0


def generate_id(db: Session, model, column, prefix: str) -> str:
    """Next identifier for `model`, based on the row inserted last."""
    latest = (
        db.query(column)
        .filter(column.like(f"{prefix}%"))
        .order_by(model.id.desc())
        .first()
    )
    return next_id(prefix, latest[0] if latest else None)


def insert_with_fresh_id(
    db: Session,
    build: Callable[[str], T],
    model,
    column,
    prefix: str,
    attempts: int = 3,
) -> T:
    """
    Build a row with a freshly generated id and commit it.
    A collision on the generated id rolls back and retries with a new one;
    exhausting the attempts raises DuplicateIdError.
    """
    last_error: IntegrityError | None = None
    taken: str | None = None
    for attempt in range(1, attempts + 1):
        new_id = generate_id(db, model, column, prefix)
        if taken is not None and _suffix(prefix, new_id) <= _suffix(prefix, taken):
            new_id = next_id(prefix, taken)
        row = build(new_id)
        db.add(row)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            last_error = e
            # Conflicts on other unique columns are not ours to retry
            if db.query(column).filter(column == new_id).first() is None:
                raise
            logger.warning(f"Generated id {new_id} already taken (attempt {attempt}/{attempts})")
            taken = new_id
            continue
        db.refresh(row)
        return row

    logger.error(f"Could not allocate a unique {prefix} id after {attempts} attempts: {last_error}")
    raise DuplicateIdError(f"{model.__name__} ID already exists")
