"""
Database helpers for concurrency control

Row locks are only taken on PostgreSQL; SQLite serializes writers anyway.
"""

import logging
from typing import Optional, TypeVar, Type
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar('T')


def is_postgres(db: Session) -> bool:
    """Check if the database is PostgreSQL"""
    bind = db.get_bind()
    return bind is not None and bind.dialect.name == 'postgresql'


def acquire_row_lock(
    db: Session,
    model: Type[T],
    filter_condition,
    nowait: bool = False
) -> Optional[T]:
    """
    Load a row with SELECT ... FOR UPDATE.

    The lock is held until the session commits or rolls back.

    Example:
        tx = acquire_row_lock(db, Transaction, Transaction.id == transaction_id)
    """
    query = db.query(model).filter(filter_condition)

    if is_postgres(db):
        query = query.with_for_update(nowait=nowait)

    return query.first()
