"""
==================================================
Database execution utilities for provisioning.
==================================================

Runs a batch of provisioning statements against an engine's
administrative database using superuser credentials.

The administrative database (e.g. 'mysql', 'postgres') is always the
connection target because DROP/CREATE DATABASE cannot run inside the
database being dropped.

Key Features:
    - SQLAlchemy URL building from the engine catalog
    - Per-connection and per-statement timeouts passed to the driver
    - One deadline for the whole batch, checked before each statement
    - Connection failures kept distinct from statement failures
    - Native driver error text preserved in StatementError
    - No pooling: every batch opens and disposes its own connection

Example:
    >>> from core.engines import lookup
    >>> from models import Credentials
    >>> from utils.database_utils import execute_statements
    >>>
    >>> execute_statements(
    ...     lookup('mysql'),
    ...     ['DROP DATABASE IF EXISTS `app_test`'],
    ...     Credentials('root', 'secret'),
    ...     connect_timeout=5
    ... )
"""

import logging
import time
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine as SAEngine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from core.engines import Engine
from models.provision_models import Credentials

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when the administrative database cannot be reached.

    Covers unreachable servers, rejected authentication and connect
    timeouts.
    """
    pass


class StatementError(Exception):
    """Exception raised when a statement in a batch fails.

    Attributes:
        index: Zero-based position of the failing statement
        statement: The SQL that failed
        native_message: Error text reported by the database driver
    """

    def __init__(self, index: int, statement: str, native_message: str):
        self.index = index
        self.statement = statement
        self.native_message = native_message
        super().__init__(f"Statement {index + 1} failed: {native_message}")


def native_error_message(error: SQLAlchemyError) -> str:
    """Extract the driver's own error text from a SQLAlchemy exception."""
    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig).strip()
    return str(error).strip()


def build_connection_url(
    engine: Engine,
    credentials: Credentials,
    database: Optional[str] = None
) -> URL:
    """
    Build the SQLAlchemy URL for connecting as the superuser.

    Args:
        engine: Engine descriptor
        credentials: Superuser credentials
        database: Database to connect to (defaults to the admin database)

    Returns:
        SQLAlchemy URL
    """
    return engine.connection_url(
        database=database or engine.admin_db,
        username=credentials.username,
        password=credentials.password
    )


def driver_connect_args(engine: Engine, connect_timeout: int, statement_timeout: int) -> Dict[str, Any]:
    """
    Translate timeouts into driver-specific connect arguments.

    Args:
        engine: Engine descriptor
        connect_timeout: Seconds allowed to establish the connection
        statement_timeout: Seconds allowed per statement

    Returns:
        Dict passed as create_engine(connect_args=...)
    """
    if engine.driver.startswith('postgresql'):
        return {
            'connect_timeout': connect_timeout,
            'options': f'-c statement_timeout={statement_timeout * 1000}'
        }
    if engine.driver.startswith('mysql'):
        return {
            'connect_timeout': connect_timeout,
            'read_timeout': statement_timeout,
            'write_timeout': statement_timeout
        }
    return {}


def create_admin_engine(
    engine: Engine,
    credentials: Credentials,
    autocommit: bool = True,
    connect_timeout: int = 10,
    statement_timeout: int = 60
) -> SAEngine:
    """
    Create an unpooled SQLAlchemy engine for the admin database.

    Args:
        engine: Engine descriptor
        credentials: Superuser credentials
        autocommit: Use AUTOCOMMIT isolation (required for DROP/CREATE
            DATABASE on PostgreSQL)
        connect_timeout: Connection timeout in seconds
        statement_timeout: Statement timeout in seconds

    Returns:
        Configured SQLAlchemy Engine
    """
    options = {
        'poolclass': NullPool,
        'connect_args': driver_connect_args(engine, connect_timeout, statement_timeout),
        'echo': False
    }
    if autocommit:
        options['isolation_level'] = 'AUTOCOMMIT'
    return create_engine(build_connection_url(engine, credentials), **options)


def execute_statements(
    engine: Engine,
    statements: Sequence[str],
    credentials: Credentials,
    autocommit: bool = True,
    connect_timeout: int = 10,
    statement_timeout: int = 60,
    target_database: Optional[str] = None
) -> None:
    """
    Execute a batch of statements in order on the admin database.

    The first failing statement aborts the batch; the statements after
    it are not executed. The batch deadline starts once connected; a
    statement is not started after it has passed, and the driver timeout
    bounds the statement already running.

    Args:
        engine: Engine descriptor
        statements: SQL statements to run in order
        credentials: Superuser credentials
        autocommit: Commit each statement individually; when False the
            batch runs in one transaction committed at the end
        connect_timeout: Connection timeout in seconds
        statement_timeout: Seconds allowed per statement and for the
            batch as a whole
        target_database: Database the batch affects (for log lines only)

    Raises:
        DatabaseConnectionError: If connecting or authenticating fails
        StatementError: If a statement fails
    """
    sa_engine = create_admin_engine(
        engine,
        credentials,
        autocommit=autocommit,
        connect_timeout=connect_timeout,
        statement_timeout=statement_timeout
    )
    label = f"{engine.engine_id}:{target_database or engine.admin_db}"

    try:
        try:
            conn = sa_engine.connect()
        except SQLAlchemyError as e:
            message = (
                f"Cannot connect to {engine.display_url()} as {credentials.username}: "
                f"{native_error_message(e)}"
            )
            logger.error(message)
            raise DatabaseConnectionError(message) from e

        with conn:
            # Literal SQL: stop the driver from treating % or : as parameter markers
            conn = conn.execution_options(no_parameters=True)
            logger.info(f"Executing {len(statements)} statements on {label}")
            deadline = time.monotonic() + statement_timeout

            for index, statement in enumerate(statements):
                if time.monotonic() >= deadline:
                    message = f"Statement batch exceeded the {statement_timeout}s timeout"
                    logger.error(f"Statement {index + 1} on {label} not started: {message}")
                    raise StatementError(index, statement, message)
                logger.debug(f"[{label}] {statement}")
                try:
                    conn.exec_driver_sql(statement)
                except SQLAlchemyError as e:
                    message = native_error_message(e)
                    logger.error(f"Statement {index + 1} on {label} failed: {message}")
                    raise StatementError(index, statement, message) from e

            if not autocommit:
                conn.commit()
    finally:
        sa_engine.dispose()
