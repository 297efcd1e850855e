"""
Database session: one connection, one command, at most one transaction.

Typical use outside a transaction (one command per session)::

    session = Session(connection_strings, "promos")
    session.command_text = "INSERT INTO items (id, name) VALUES (@id, @name)"
    session.add_parameter("id", 1)
    session.add_parameter("name", "a")
    session.execute_non_query()  # the session is disposed afterwards

Inside a transaction the session stays open until it is disposed::

    with Session(connection_strings, "promos", transaction=True) as session:
        session.command_text = "UPDATE items SET name = @name WHERE id = @id"
        session.set_parameters({"id": 1, "name": "b"})
        session.execute_non_query()
        session.commit()

Leaving the ``with`` block without ``commit()`` rolls the transaction back.
Driver errors are never wrapped.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, TypeVar, Union

from .command import Command, CommandType, ParameterLike
from .config import ConnectionStrings
from .errors import ConnectionStringNotFoundError, SessionDisposedError, TransactionError
from .infra.db import Driver, get_driver
from .results import DataSet, DataTable, RowReader, skip_row_counts

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionState(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    BROKEN = "broken"


class Transaction:
    """Transaction on a DB-API connection opened with autocommit off."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def commit(self) -> None:
        self._connection.commit()
        self._active = False

    def rollback(self) -> None:
        try:
            self._connection.rollback()
        finally:
            self._active = False

    def dispose(self) -> None:
        """Roll back unless already committed or rolled back."""
        if self._active:
            self.rollback()


def _scalar(cursor: Any) -> int:
    row = cursor.fetchone() if skip_row_counts(cursor) else None
    if row is None or row[0] is None:
        return 0
    return int(row[0])


def _row_count(cursor: Any) -> int:
    return cursor.rowcount


class Session:
    """Connection, command and optional transaction for one configured database.

    Args:
        connection_strings: Store the connection name is resolved in.
        name: Connection name, matched case-insensitively.
        transaction: Begin a transaction right after connecting.  Without
            it the session runs exactly one command and then disposes
            itself.
        driver: Driver to use instead of the one registered for the
            entry's provider.

    Raises:
        ConnectionStringNotFoundError: If ``name`` is not configured.
        KeyError: If the entry's provider has no registered driver.
    """

    def __init__(
        self,
        connection_strings: ConnectionStrings,
        name: str,
        transaction: bool = False,
        *,
        driver: Optional[Driver] = None,
    ) -> None:
        self.name = name
        self.is_transaction = transaction
        self.command = Command()
        self._connection: Any = None
        self._state = ConnectionState.CLOSED
        self._transaction: Optional[Transaction] = None
        self._disposed = False
        self._spent = False

        settings = connection_strings.find(name)
        if settings is None:
            raise ConnectionStringNotFoundError(name)
        self._connection_string = settings.connection_string
        self._driver = driver or get_driver(settings.provider)

        try:
            self.open()
            if transaction:
                self._driver.begin(self._connection)
                self._transaction = Transaction(self._connection)
                logger.info("[session] Transaction started", extra=self._log_context())
        except Exception:
            self._close(quiet=True)
            self._disposed = True
            raise

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return (
            f"Session(name={self.name!r}, driver={self._driver.name!r}, "
            f"state={self._state.name}, transaction={self.in_transaction})"
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None and self._transaction.active

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Command
    # ------------------------------------------------------------------

    @property
    def command_text(self) -> str:
        return self.command.text

    @command_text.setter
    def command_text(self, value: str) -> None:
        self.command.text = value

    @property
    def command_type(self) -> CommandType:
        return self.command.command_type

    @command_type.setter
    def command_type(self, value: CommandType) -> None:
        self.command.command_type = value

    def add_parameter(self, name: str, value: Any) -> None:
        self.command.add_parameter(name, value)

    def add_parameter_object(self, parameter: Any) -> None:
        self.command.add_parameter_object(parameter)

    def set_parameters(self, parameters: Union[Iterable[ParameterLike], Mapping[str, Any]]) -> None:
        self.command.set_parameters(parameters)

    def clear_parameters(self) -> None:
        self.command.clear_parameters()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Connect unless already open.

        A broken connection is never replaced: the transaction that needed
        it died with it.
        """
        if self._disposed:
            raise SessionDisposedError("Session has been disposed")
        if self._state is ConnectionState.OPEN:
            return
        if self._state is ConnectionState.BROKEN:
            raise TransactionError("Connection was lost during the transaction")
        self._connection = self._driver.connect(
            self._connection_string, autocommit=not self.is_transaction
        )
        self._state = ConnectionState.OPEN
        logger.info("[session] Connection opened", extra=self._log_context())

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute_non_query(self) -> int:
        """Run the command and return the number of affected rows."""
        return self._run(_row_count)

    def execute_scalar(self) -> int:
        """Run the command and return its first value as an ``int``.

        No row, or a ``NULL`` value, gives ``0``.
        """
        return self._run(_scalar)

    def fetch_table(self) -> DataTable:
        """Run the command and copy its first result set into a ``DataTable``."""
        return self._run(DataTable.from_cursor)

    def fetch_dataset(self) -> DataSet:
        """Run the command and copy every result set into a ``DataSet``."""
        return self._run(DataSet.from_cursor)

    def execute_reader(self) -> RowReader:
        """Run the command and return a reader over the live cursor.

        Outside a transaction the session is disposed when the reader is
        closed; no other command can run on it in the meantime.
        """
        self._start()
        try:
            cursor = self._open_cursor()
        except Exception as err:
            self._mark_if_broken(err)
            self._release(quiet=True)
            raise
        return RowReader(cursor, on_close=self._release)

    def _run(self, read: Callable[[Any], T]) -> T:
        self._start()
        try:
            cursor = self._open_cursor()
            try:
                result = read(cursor)
            finally:
                cursor.close()
        except Exception as err:
            self._mark_if_broken(err)
            self._release(quiet=True)
            raise
        self._release()
        return result

    def _start(self) -> None:
        if self._disposed or self._spent:
            raise SessionDisposedError(
                "Session has been disposed; open a new session or use a transaction"
            )
        if self._transaction is not None and not self._transaction.active:
            raise TransactionError("Transaction has already been committed or rolled back")
        if not self.is_transaction:
            self._spent = True

    def _open_cursor(self) -> Any:
        self.open()
        sql, args = self._driver.prepare(self.command)
        logger.debug(
            "[session] Executing command",
            extra=dict(
                self._log_context(),
                command_type=self.command.command_type.value,
                paramstyle=self._driver.paramstyle,
                parameters=self.command.parameter_names(),
            ),
        )
        cursor = self._connection.cursor()
        try:
            if args is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, args)
        except Exception:
            cursor.close()
            raise
        return cursor

    def _release(self, quiet: bool = False) -> None:
        # quiet while a driver error is propagating, so it is not replaced
        if not self.is_transaction:
            self._dispose(quiet)

    def _mark_if_broken(self, err: BaseException) -> None:
        if self._connection is not None and isinstance(err, self._driver.broken_errors):
            self._state = ConnectionState.BROKEN
            logger.warning("[session] Connection broken", extra=self._log_context())

    # ------------------------------------------------------------------
    # Transaction
    # ------------------------------------------------------------------

    def commit(self) -> None:
        """Commit the active transaction.

        Raises:
            TransactionError: If there is no active transaction.
        """
        transaction = self._active_transaction()
        try:
            transaction.commit()
        except Exception as err:
            self._mark_if_broken(err)
            raise
        logger.info("[session] Transaction committed", extra=self._log_context())

    def rollback(self) -> None:
        """Roll back the active transaction.

        Raises:
            TransactionError: If there is no active transaction.
        """
        transaction = self._active_transaction()
        try:
            transaction.rollback()
        except Exception as err:
            self._mark_if_broken(err)
            raise
        logger.info("[session] Transaction rolled back", extra=self._log_context())

    def _active_transaction(self) -> Transaction:
        if self._disposed:
            raise SessionDisposedError("Session has been disposed")
        if self._transaction is None:
            raise TransactionError("Session was not opened with a transaction")
        if not self._transaction.active:
            raise TransactionError("Transaction has already been committed or rolled back")
        return self._transaction

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Roll back an uncommitted transaction and close the connection.

        Safe to call more than once.
        """
        self._dispose(quiet=False)

    close = dispose

    def _dispose(self, quiet: bool) -> None:
        if self._disposed:
            return
        self._disposed = True
        quiet = quiet or self._state is ConnectionState.BROKEN
        try:
            if self._transaction is not None:
                self._transaction.dispose()
        except Exception:
            if not quiet:
                raise
            logger.warning(
                "[session] Rollback failed during disposal",
                extra=self._log_context(),
                exc_info=True,
            )
        finally:
            self._close(quiet=quiet)
        logger.info("[session] Disposed", extra=self._log_context())

    def _close(self, quiet: bool = False) -> None:
        connection, self._connection = self._connection, None
        self._state = ConnectionState.CLOSED
        if connection is None:
            return
        try:
            connection.close()
        except Exception:
            if not quiet:
                raise
            logger.warning(
                "[session] Error closing connection", extra=self._log_context(), exc_info=True
            )

    def _log_context(self) -> Dict[str, Any]:
        return {"connection": self.name, "driver": self._driver.name}
