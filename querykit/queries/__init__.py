"""Query builders for database operations.

This module provides composable query builder classes that encapsulate
filter logic, making repositories cleaner and queries more testable.

Usage:
    from querykit.queries import MemberQuery

    results = (
        MemberQuery(db)
        .with_team_columns()
        .search(condition)
        .order_by("id")
        .paginate(limit=50, offset=0)
        .all()
    )
"""

from querykit.queries.base import BaseQuery
from querykit.queries.members import MemberQuery, TeamQuery
from querykit.queries.projections import (
    ConstructorProjection,
    FieldProjection,
    Projections,
    RowMapper,
    SetterProjection,
)

__all__ = [
    "BaseQuery",
    "MemberQuery",
    "TeamQuery",
    "RowMapper",
    "Projections",
    "FieldProjection",
    "SetterProjection",
    "ConstructorProjection",
]
