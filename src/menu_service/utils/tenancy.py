from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement


def tenant_or_global(column, tenant_id: int | None) -> ColumnElement[bool]:
    """
    Scope a query to one tenant's rows plus the global (tenant-less) rows.

    Without a tenant only global rows are visible.

    Example:
        db.query(MenuLocation).filter(tenant_or_global(MenuLocation.tenant_id, 7))
        # WHERE menu_locations.tenant_id = 7 OR menu_locations.tenant_id IS NULL
    """
    if tenant_id is None:
        return column.is_(None)
    return or_(column == tenant_id, column.is_(None))
