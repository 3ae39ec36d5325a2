"""Tenant-scoped query construction.

Every read of tenant-owned rows goes through ``tenant_query`` so there is no
code path that fetches rows without a tenant filter.
"""

import logging
from typing import Iterable, TypeVar

from sqlalchemy.orm import Query, Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


def tenant_query(db: Session, model: type[T], tenant_id: int) -> Query:
    """Return a query over ``model`` already filtered to ``tenant_id``."""
    if tenant_id is None:
        raise ValueError(f"tenant_id is required to query {model.__name__}")
    return db.query(model).filter(model.tenant_id == tenant_id)


def only_tenant_rows(rows: Iterable[T], tenant_id: int) -> list[T]:
    """
    Drop any row not owned by ``tenant_id``.

    Second line of defence after the query filter; a dropped row means the
    query boundary was bypassed and is logged as an error.
    """
    rows = list(rows)
    kept = [row for row in rows if row.tenant_id == tenant_id]
    if len(kept) != len(rows):
        foreign = sorted({row.tenant_id for row in rows if row.tenant_id != tenant_id})
        logger.error(
            f"Dropped {len(rows) - len(kept)} rows from tenants {foreign} "
            f"while listing for tenant {tenant_id}"
        )
    return kept
