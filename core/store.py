# app/core/store.py
"""
Generic record store client.

Every entity service talks to the database through ``RecordStore``: tables are
addressed by name, filters are column/value equality maps and every call runs
in its own session, so independent calls may be awaited concurrently.
"""
import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, insert as sa_insert, select
from sqlalchemy import update as sa_update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from core.config import settings
from core.constants import MULTIPLE_ROWS_CODE
from core.exceptions import AppError, NotFoundError, StoreError, ValidationError
from models import Base

logger = logging.getLogger(__name__)

Filters = Optional[Dict[str, Any]]

_TRANSIENT_ERRORS = (OperationalError, InterfaceError, TimeoutError, ConnectionError)

_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _error_code(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    for attr in ("pgcode", "sqlstate"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return type(orig or exc).__name__


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    return _error_code(exc) == "23503" or "FOREIGN KEY" in str(exc.orig).upper()


@contextmanager
def translate_errors(table: str):
    """Re-raise driver and SQLAlchemy failures as AppError.

    Constraint violations are the caller's fault and become ValidationError;
    everything else is a StoreError. Driver text and SQL stay in the log.
    """
    try:
        yield
    except AppError:
        raise
    except IntegrityError as e:
        logger.warning(f"{table}: constraint violation: {e.orig}")
        if _is_foreign_key_violation(e):
            raise ValidationError(
                f"{table}: referenced record does not exist", code="FOREIGN_KEY_VIOLATION"
            ) from e
        raise ValidationError(
            f"{table}: value violates a constraint", code="CONSTRAINT_VIOLATION"
        ) from e
    except (SQLAlchemyError, TimeoutError, ConnectionError) as e:
        code = _error_code(e)
        logger.error(f"{table}: store failure {code}: {e}")
        error = StoreError(f"{table}: store operation failed ({code})", code=code)
        error.transient = isinstance(e, _TRANSIENT_ERRORS) or bool(
            getattr(e, "connection_invalidated", False)
        )
        raise error from e


class RecordStore:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        read_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.read_retries = settings.STORE_READ_RETRIES if read_retries is None else read_retries
        self.retry_backoff = settings.STORE_RETRY_BACKOFF if retry_backoff is None else retry_backoff
        self.tables = {
            mapper.class_.__tablename__: mapper.class_
            for mapper in Base.registry.mappers
        }

    # ---------- helpers ----------

    def model_for(self, table: str):
        try:
            return self.tables[table]
        except KeyError:
            raise StoreError(f"Unknown table: {table}", code="UNKNOWN_TABLE")

    def _column(self, model, name: str):
        column = getattr(model, name, None)
        if column is None:
            raise StoreError(f"Unknown column {model.__tablename__}.{name}", code="UNKNOWN_COLUMN")
        return column

    def _where(self, model, filters: Filters) -> list:
        clauses = []
        for key, value in (filters or {}).items():
            column = self._column(model, key)
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(value)))
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == value)
        return clauses

    def _options(self, model, include: Iterable[str]) -> list:
        return [selectinload(self._column(model, name)) for name in include]

    async def _read(self, table: str, operation: Callable):
        """Run an idempotent read, retrying transient store failures with backoff."""
        attempt = 0
        while True:
            try:
                with translate_errors(table):
                    return await operation()
            except StoreError as e:
                if not getattr(e, "transient", False) or attempt >= self.read_retries:
                    raise
                delay = self.retry_backoff * (2 ** attempt)
                attempt += 1
                logger.warning(
                    f"Transient store error reading {table} ({e.code}), "
                    f"retry {attempt}/{self.read_retries} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

    # ---------- reads ----------

    async def select(
        self,
        table: str,
        filters: Filters = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        include: Sequence[str] = (),
        limit: Optional[int] = None,
    ) -> List[Any]:
        model = self.model_for(table)
        stmt = select(model).where(*self._where(model, filters)).options(*self._options(model, include))
        if order_by:
            column = self._column(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async def operation():
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())

        return await self._read(table, operation)

    async def select_one(self, table: str, filters: Filters, include: Sequence[str] = ()):
        """Return exactly one row; NotFoundError when nothing matches."""
        model = self.model_for(table)
        stmt = (
            select(model)
            .where(*self._where(model, filters))
            .options(*self._options(model, include))
            .limit(2)
        )

        async def operation():
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
            if not rows:
                raise NotFoundError(table, filters)
            if len(rows) > 1:
                raise StoreError(
                    f"{table}: more than one row matches {filters}", code=MULTIPLE_ROWS_CODE
                )
            return rows[0]

        return await self._read(table, operation)

    async def count(self, table: str, filters: Filters = None) -> int:
        model = self.model_for(table)
        stmt = select(func.count()).select_from(model).where(*self._where(model, filters))

        async def operation():
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return int(result.scalar_one())

        return await self._read(table, operation)

    # ---------- writes (never retried) ----------

    async def insert(self, table: str, values: Dict[str, Any]):
        model = self.model_for(table)
        with translate_errors(table):
            async with self.session_factory() as session:
                row = model(**values)
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return row

    async def insert_many(
        self,
        table: str,
        rows: List[Dict[str, Any]],
        ignore_conflicts_on: Optional[Sequence[str]] = None,
    ) -> int:
        """Insert several rows in one statement and return how many were created.

        With ``ignore_conflicts_on`` rows colliding with an existing row on those
        unique columns are skipped, which makes the call safe to repeat.
        """
        if not rows:
            return 0

        model = self.model_for(table)
        table_obj = model.__table__
        with translate_errors(table):
            async with self.session_factory() as session:
                dialect = session.get_bind().dialect.name
                if ignore_conflicts_on:
                    dialect_insert = _CONFLICT_INSERTS.get(dialect)
                    if dialect_insert is None:
                        raise StoreError(
                            f"Conflict-ignoring inserts are not supported on {dialect}",
                            code="UNSUPPORTED_DIALECT",
                        )
                    stmt = dialect_insert(table_obj).on_conflict_do_nothing(
                        index_elements=list(ignore_conflicts_on)
                    )
                else:
                    stmt = sa_insert(table_obj)

                conn = await session.connection()
                result = await conn.execute(stmt.returning(table_obj.c.id), rows)
                inserted = len(result.all())
                await session.commit()
                return inserted

    async def update(
        self,
        table: str,
        row_id: str,
        patch: Dict[str, Any],
        include: Sequence[str] = (),
        expected: Filters = None,
    ):
        """Apply ``patch`` to one row and return the fresh row.

        Patch values may be SQL expressions; they are evaluated by the store.
        ``expected`` adds column/value conditions the row must still meet, so
        the write only lands if nobody changed those columns in between.
        """
        model = self.model_for(table)
        if patch:
            conditions = {"id": row_id, **(expected or {})}
            stmt = (
                sa_update(model)
                .where(*self._where(model, conditions))
                .values(**patch)
                .execution_options(synchronize_session=False)
            )
            with translate_errors(table):
                async with self.session_factory() as session:
                    result = await session.execute(stmt)
                    if result.rowcount == 0:
                        await session.rollback()
                        raise NotFoundError(table, conditions)
                    await session.commit()

        return await self.select_one(table, {"id": row_id}, include=include)

    async def increment(
        self,
        table: str,
        row_id: str,
        deltas: Dict[str, Any],
        extra: Optional[Dict[str, Any]] = None,
    ):
        """Atomically add ``deltas`` to numeric columns in a single UPDATE.

        The new value is computed by the store (``col = col + :delta``), so
        concurrent increments of the same row never overwrite each other.
        """
        model = self.model_for(table)
        patch = {
            name: self._column(model, name) + delta
            for name, delta in deltas.items()
        }
        patch.update(extra or {})
        return await self.update(table, row_id, patch)

    async def delete(self, table: str, row_id: str) -> bool:
        return await self.delete_where(table, {"id": row_id}) > 0

    async def delete_where(self, table: str, filters: Dict[str, Any]) -> int:
        if not filters:
            raise StoreError(f"{table}: refusing to delete without filters", code="UNFILTERED_DELETE")
        model = self.model_for(table)
        stmt = (
            sa_delete(model)
            .where(*self._where(model, filters))
            .execution_options(synchronize_session=False)
        )
        with translate_errors(table):
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
                return result.rowcount

    async def delete_cascade(self, table: str, row_id: str, dependents: Dict[str, str]) -> int:
        """Delete a row and the rows that reference it in one transaction.

        ``dependents`` maps each child table to its column holding ``row_id``.
        Children go first, the parent last; any failure rolls everything back.
        Returns the number of dependent rows removed.
        """
        model = self.model_for(table)
        statements = []
        for child_table, column in dependents.items():
            child = self.model_for(child_table)
            statements.append(
                sa_delete(child)
                .where(*self._where(child, {column: row_id}))
                .execution_options(synchronize_session=False)
            )

        with translate_errors(table):
            async with self.session_factory() as session:
                removed = 0
                for stmt in statements:
                    result = await session.execute(stmt)
                    removed += result.rowcount

                result = await session.execute(
                    sa_delete(model)
                    .where(*self._where(model, {"id": row_id}))
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    await session.rollback()
                    raise NotFoundError(table, {"id": row_id})

                await session.commit()
                return removed
