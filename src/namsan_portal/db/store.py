"""Rows-and-filters access to the hosted tables.

Services talk to the backend through this narrow query shape (equality
filters, ordering, limit, maybe-one, insert, upsert on an explicit conflict
key) instead of writing SQL, so any store offering the same shape can stand in.

Example:
    popups = (
        store.table(PopupAd)
        .eq("is_active", True)
        .order("display_order")
        .limit(10)
        .execute()
    )
"""
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, select

from namsan_portal.db.sessions import get_session

ModelT = TypeVar("ModelT", bound=SQLModel)


class TableQuery(Generic[ModelT]):
    """Chainable query over one table. Filters apply to reads, updates and deletes."""

    def __init__(self, engine: Engine, model: type[ModelT]) -> None:
        self._engine = engine
        self._model = model
        self._filters: list[Any] = []
        self._order_by: list[Any] = []
        self._limit: int | None = None

    def _column(self, name: str) -> Any:
        if name not in self._model.model_fields:
            raise ValueError(f"Unknown column '{name}' on {self._model.__name__}")
        return getattr(self._model, name)

    def eq(self, column: str, value: Any) -> "TableQuery[ModelT]":
        self._filters.append(self._column(column) == value)
        return self

    def neq(self, column: str, value: Any) -> "TableQuery[ModelT]":
        self._filters.append(self._column(column) != value)
        return self

    def order(self, column: str, *, ascending: bool = True) -> "TableQuery[ModelT]":
        col = self._column(column)
        self._order_by.append(col.asc() if ascending else col.desc())
        return self

    def limit(self, count: int) -> "TableQuery[ModelT]":
        self._limit = count
        return self

    def _select(self):
        stmt = select(self._model)
        if self._filters:
            stmt = stmt.where(*self._filters)
        if self._order_by:
            stmt = stmt.order_by(*self._order_by)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        return stmt

    def execute(self) -> list[ModelT]:
        """Run the select and return all matching rows."""
        with get_session(self._engine) as session:
            return list(session.exec(self._select()).all())

    def maybe_single(self) -> ModelT | None:
        """Return the only matching row, None when there is none.

        Raises:
            ValueError: more than one row matched.
        """
        with get_session(self._engine) as session:
            rows = list(session.exec(self._select().limit(2)).all())
        if len(rows) > 1:
            raise ValueError(f"Expected at most one {self._model.__name__} row, got several")
        return rows[0] if rows else None

    def insert(self, rows: Sequence[dict[str, Any]]) -> list[ModelT]:
        """Insert rows and return them with generated defaults filled in."""
        instances = [self._model(**row) for row in rows]
        with get_session(self._engine) as session:
            session.add_all(instances)
        return instances

    def upsert(self, values: dict[str, Any], *, on_conflict: Sequence[str]) -> ModelT:
        """Insert `values`, or update the row that matches them on `on_conflict`."""
        missing = [c for c in on_conflict if c not in values]
        if missing:
            raise ValueError(f"Conflict columns missing from values: {', '.join(missing)}")
        stmt = select(self._model).where(
            *(self._column(c) == values[c] for c in on_conflict)
        )
        with get_session(self._engine) as session:
            row = session.exec(stmt).first()
            if row is None:
                row = self._model(**values)
            else:
                for key, value in values.items():
                    self._column(key)
                    setattr(row, key, value)
            session.add(row)
        return row

    def update(self, values: dict[str, Any]) -> int:
        """Apply `values` to every filtered row; return the number of rows touched."""
        for key in values:
            self._column(key)
        with get_session(self._engine) as session:
            rows = list(session.exec(self._select()).all())
            for row in rows:
                for key, value in values.items():
                    setattr(row, key, value)
                session.add(row)
        return len(rows)

    def delete(self) -> int:
        """Delete every filtered row (all rows when unfiltered)."""
        with get_session(self._engine) as session:
            rows = list(session.exec(self._select()).all())
            for row in rows:
                session.delete(row)
        return len(rows)


class DataStore:
    """Entry point for table queries against one engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def table(self, model: type[ModelT]) -> TableQuery[ModelT]:
        return TableQuery(self._engine, model)

    def replace_all(self, model: type[ModelT], rows: Sequence[dict[str, Any]]) -> list[ModelT]:
        """Delete every row of `model` and insert `rows` in one transaction."""
        instances = [model(**row) for row in rows]
        with get_session(self._engine) as session:
            for existing in session.exec(select(model)).all():
                session.delete(existing)
            session.flush()
            session.add_all(instances)
        return instances
