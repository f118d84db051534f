"""Base query builder class.

Provides common query operations that all query builders inherit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

from sqlalchemy import asc, desc
from sqlalchemy.exc import MultipleResultsFound, NoResultFound
from sqlalchemy.orm import Query, contains_eager

from querykit.config import settings
from querykit.errors import AmbiguousResultError, NotFoundError
from querykit.logging import get_logger
from querykit.queries.expressions import Predicate, all_of

if TYPE_CHECKING:
    from sqlalchemy.engine import Row
    from sqlalchemy.orm import Session

    from querykit.queries.projections import RowMapper

T = TypeVar("T")
D = TypeVar("D")

logger = get_logger(__name__)

NULLS_POLICIES = {"first", "last"}


def _entity_name(target: Any) -> str:
    """Name of the mapped class a join target points at."""
    if isinstance(target, type):
        return target.__name__
    mapper = getattr(getattr(target, "property", None), "mapper", None)
    if mapper is not None:
        return mapper.class_.__name__
    return str(target)


class BaseQuery(Generic[T]):
    """Base class for composable query builders.

    Provides fluent interface for building SQLAlchemy queries with:
    - Chainable filter methods that ignore absent predicates
    - Inner, outer and theta joins, plus fetch joins
    - Projections, grouping and aggregates
    - Ordering with an explicit NULL placement
    - Pagination
    - Bulk update and delete

    Every chained call returns a new builder; the original is left untouched.

    Subclasses should:
    1. Set `model_class` to the SQLAlchemy model
    2. Define `ordering_fields` mapping field names to model attributes
    3. Implement domain-specific filter methods
    """

    model_class: type[T]
    ordering_fields: ClassVar[dict[str, Any]] = {}

    def __init__(self, db: Session):
        self.db = db
        self._query: Query = db.query(self.model_class)
        self._ordered = False
        self._joined: frozenset[str] = frozenset()

    def _clone(self) -> Self:
        """Create a copy of this query builder with current state."""
        new = self.__class__.__new__(self.__class__)
        new.db = self.db
        new._query = self._query
        new._ordered = self._ordered
        new._joined = self._joined
        return new

    @property
    def _model_name(self) -> str:
        return self.model_class.__name__

    def has_joined(self, entity: Any) -> bool:
        """True once ``entity`` (a mapped class or relationship) has been joined."""
        return _entity_name(entity) in self._joined

    def _record_join(self, target: Any) -> None:
        self._joined = self._joined | {_entity_name(target)}

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def where(self, *predicates: Predicate | None) -> Self:
        """AND the given predicates into the WHERE clause, skipping ``None``."""
        predicate = all_of(*predicates)
        if predicate is None:
            return self
        clone = self._clone()
        clone._query = clone._query.filter(predicate)
        return clone

    def by_id(self, id: int) -> Self:
        """Filter by primary key ID."""
        clone = self._clone()
        id_column = getattr(self.model_class, "id", None)
        if id_column is not None:
            clone._query = clone._query.filter(id_column == id)
        return clone

    def by_ids(self, ids: list[int]) -> Self:
        """Filter by multiple IDs."""
        clone = self._clone()
        id_column = getattr(self.model_class, "id", None)
        if id_column is not None and ids:
            clone._query = clone._query.filter(id_column.in_(ids))
        return clone

    # -------------------------------------------------------------------------
    # Joins
    # -------------------------------------------------------------------------

    def join(self, target: Any, onclause: Any = None) -> Self:
        """Inner join; rows without a match on ``target`` are dropped."""
        clone = self._clone()
        clone._record_join(target)
        if onclause is None:
            clone._query = clone._query.join(target)
        else:
            clone._query = clone._query.join(target, onclause)
        return clone

    def outer_join(self, target: Any, onclause: Any = None, on: Predicate | None = None) -> Self:
        """Left outer join.

        ``on`` is added to the ON clause, not to WHERE: left-side rows are all
        kept and the joined columns come back NULL where ``on`` does not hold.
        """
        clone = self._clone()
        clone._record_join(target)
        if on is not None:
            if onclause is None:
                target = target.and_(on)
            else:
                onclause = all_of(onclause, on)
        if onclause is None:
            clone._query = clone._query.outerjoin(target)
        else:
            clone._query = clone._query.outerjoin(target, onclause)
        return clone

    def theta_join(self, target: Any, onclause: Predicate) -> Self:
        """Inner join on columns that have no declared relationship."""
        return self.join(target, onclause)

    def fetch_join(self, relationship: Any) -> Self:
        """Inner join a relationship and populate it from the same row."""
        clone = self._clone()
        clone._record_join(relationship)
        clone._query = clone._query.join(relationship).options(contains_eager(relationship))
        return clone

    # -------------------------------------------------------------------------
    # Select list and grouping
    # -------------------------------------------------------------------------

    def select(self, *columns: Any) -> Self:
        """Replace the select list; results come back as rows."""
        if not columns:
            raise ValueError("select() requires at least one column or entity.")
        clone = self._clone()
        clone._query = clone._query.with_entities(*columns)
        return clone

    def group_by(self, *keys: Any) -> Self:
        """Group the result set by ``keys``.

        HAVING is not supported yet; filter the grouped rows in Python or add
        a ``having()`` step here when a caller needs it.
        """
        if not keys:
            raise ValueError("group_by() requires at least one grouping key.")
        clone = self._clone()
        clone._query = clone._query.group_by(*keys)
        return clone

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def order_by(self, field: str | Any, direction: str = "asc", nulls: str | None = None) -> Self:
        """Apply ordering to the query.

        Args:
            field: Field name (must be in ordering_fields) or a column expression
            direction: 'asc' or 'desc'
            nulls: 'first', 'last' or None to keep the database default

        Repeated calls add sort keys in call order.
        """
        if isinstance(field, str):
            column = self.ordering_fields.get(field)
            if column is None:
                raise ValueError(f"Cannot order {self._model_name} by '{field}'.")
        else:
            column = field
        clause = desc(column) if direction.lower() == "desc" else asc(column)
        if nulls is not None:
            if nulls not in NULLS_POLICIES:
                raise ValueError(f"nulls must be 'first' or 'last', got '{nulls}'.")
            clause = clause.nulls_last() if nulls == "last" else clause.nulls_first()
        clone = self._clone()
        clone._query = clone._query.order_by(clause)
        clone._ordered = True
        return clone

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def paginate(self, limit: int | None = None, offset: int = 0) -> Self:
        """Apply pagination to the query.

        ``limit`` caps the row count, so ``limit=0`` yields an empty page.
        ``offset`` is zero-based. Negative values raise ``ValueError``.
        Page boundaries are only stable when the query is ordered; paginating
        an unordered query is logged.
        """
        if limit is None:
            limit = settings.query_default_limit
        if limit < 0:
            raise ValueError(f"limit must be zero or positive, got {limit}.")
        if offset < 0:
            raise ValueError(f"offset must be zero or positive, got {offset}.")
        if not self._ordered:
            logger.warning(
                "query_paginate_unordered model=%s limit=%s offset=%s",
                self._model_name,
                limit,
                offset,
            )
        clone = self._clone()
        clone._query = clone._query.limit(limit)
        if offset > 0:
            clone._query = clone._query.offset(offset)
        return clone

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def all(self) -> list[T]:
        """Execute query and return all results."""
        return self._query.all()

    def first(self) -> T | None:
        """Execute query and return first result."""
        return self._query.first()

    def one(self) -> T:
        """Return exactly one result.

        Raises NotFoundError on zero rows and AmbiguousResultError on more
        than one.
        """
        try:
            return self._query.one()
        except NoResultFound as exc:
            logger.debug("query_one_not_found model=%s", self._model_name)
            raise NotFoundError("not_found", f"{self._model_name} not found") from exc
        except MultipleResultsFound as exc:
            logger.debug("query_one_ambiguous model=%s", self._model_name)
            raise AmbiguousResultError(
                "ambiguous_result", f"Expected one {self._model_name}, found several"
            ) from exc

    def one_or_none(self) -> T | None:
        """Return one result or None; more than one raises AmbiguousResultError."""
        try:
            return self._query.one_or_none()
        except MultipleResultsFound as exc:
            logger.debug("query_one_ambiguous model=%s", self._model_name)
            raise AmbiguousResultError(
                "ambiguous_result", f"Expected at most one {self._model_name}, found several"
            ) from exc

    def scalars(self) -> list[Any]:
        """Return the first column of every row."""
        return list(self.db.execute(self._query.statement).scalars().all())

    def count(self) -> int:
        """Return count of matching records."""
        return self._query.count()

    def exists(self) -> bool:
        """Check if any matching records exist."""
        return self.db.query(self._query.exists()).scalar()

    def aggregate(self, *expressions: Any) -> Row:
        """Evaluate aggregate expressions over the filtered rows."""
        if not expressions:
            raise ValueError("aggregate() requires at least one expression.")
        return self._query.with_entities(*expressions).order_by(None).one()

    def project(self, mapper: RowMapper[D]) -> list[D]:
        """Select the mapper's columns and map every row to a DTO."""
        rows = self._query.with_entities(*mapper.columns).all()
        return [mapper.map(row) for row in rows]

    def query(self) -> Query:
        """Return the underlying SQLAlchemy Query object."""
        return self._query

    # -------------------------------------------------------------------------
    # Bulk writes
    # -------------------------------------------------------------------------

    def update(self, values: dict[Any, Any]) -> int:
        """Run a bulk UPDATE now and return the affected-row count.

        Objects already loaded in the session keep their old values until the
        caller expires them (see ``querykit.db.clear_cache``).
        """
        rows = self._query.update(values, synchronize_session=False)
        logger.info("query_bulk_update model=%s rows=%s", self._model_name, rows)
        return rows

    def delete(self) -> int:
        """Run a bulk DELETE now and return the affected-row count.

        Deleted objects stay in the session until it is expired or cleared.
        """
        rows = self._query.delete(synchronize_session=False)
        logger.info("query_bulk_delete model=%s rows=%s", self._model_name, rows)
        return rows
