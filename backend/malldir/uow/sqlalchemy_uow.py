"""
SQLAlchemy units of work over the Flask-scoped session.

Both classes satisfy :class:`malldir.uow.base.AccountsUnitOfWork`.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from malldir.core.extensions import db
from malldir.repositories import AccountRepository

log = logging.getLogger(__name__)

# leading SQL keywords refused inside a read-only unit of work
WRITE_KEYWORDS = frozenset(
    {"insert", "update", "delete", "merge", "replace", "create", "alter", "drop", "truncate"}
)


class _AccountsOnSession:
    def __init__(self, session: Session | scoped_session) -> None:
        self.session = session
        self.accounts = AccountRepository(session=session)


class SQLAlchemyUnitOfWork(_AccountsOnSession):
    """Read-write unit: commit on a clean exit, roll back when the block raises."""

    def __init__(self) -> None:
        super().__init__(db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_AccountsOnSession):
    """
    Read unit that can never write.

    Opens its own transaction when the session is idle and rolls it back on
    exit; inside an already running transaction it only attaches. Either way
    ORM flushes of pending changes and DML statements raise ``RuntimeError``.
    On PostgreSQL and MySQL an owned transaction is also declared
    ``READ ONLY`` with the requested isolation level.
    """

    def __init__(
        self, *, isolation_level: str | None = "READ COMMITTED", enforce_db_readonly: bool = True
    ) -> None:
        super().__init__(db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._guarded: tuple[Session, Connection] | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            self._owned = self.session.begin()
        except InvalidRequestError:
            self._owned = None

        conn = self.session.connection()
        self._guard(conn)
        if self._owned is not None and conn.dialect.name in ("postgresql", "mysql", "mariadb"):
            self._declare_read_only()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
        finally:
            self._owned = None
            self._unguard()

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _declare_read_only(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.strip().upper()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("Read-only transaction directives rejected, guards only: %s", exc)

    # ----------------------------- Guards -------------------------------------

    def _refuse_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

    def _refuse_dml(self, conn, cursor, statement, parameters, context, executemany) -> None:
        words = (statement or "").split(None, 1)
        keyword = words[0].lower() if words else ""
        if keyword in WRITE_KEYWORDS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}")

    def _guard(self, conn: Connection) -> None:
        if self._guarded is not None:
            return
        session = self.session() if isinstance(self.session, scoped_session) else self.session
        event.listen(session, "before_flush", self._refuse_flush)
        event.listen(conn, "before_cursor_execute", self._refuse_dml)
        self._guarded = (session, conn)

    def _unguard(self) -> None:
        if self._guarded is None:
            return
        session, conn = self._guarded
        self._guarded = None
        with suppress(InvalidRequestError):
            event.remove(session, "before_flush", self._refuse_flush)
        with suppress(InvalidRequestError):
            event.remove(conn, "before_cursor_execute", self._refuse_dml)
