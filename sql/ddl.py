"""
=======================================================================
Data Definition Language (DDL) for database provisioning.
=======================================================================

Generates the engine-specific statements that drop, recreate and grant
access to a database. Templates come from the engine catalog in
core.engines; this module only validates and renders them.

Identifiers (database and user names) are restricted to [A-Za-z0-9_] and
interpolated inside the engine's identifier quotes (backticks for MySQL,
double quotes for PostgreSQL), so case is kept and reserved words or a
leading digit are accepted. Passwords are rendered as escaped string
literals.

Functions:
    validate_identifier: Reject names unsafe for SQL interpolation
    quote_literal: Render a string literal for an engine
    drop_database_sql: Generate DROP DATABASE IF EXISTS
    create_database_sql: Generate CREATE DATABASE with UTF-8 settings
    grant_privileges_sql: Generate the grant statements for the app user
    build_provision_script: Full ordered drop/create/grant script

Example:
    >>> from core.engines import POSTGRESQL
    >>> from models import ProvisionRequest
    >>> from sql.ddl import build_provision_script
    >>>
    >>> request = ProvisionRequest(POSTGRESQL, 'app_test', 'dev', 'dev')
    >>> for statement in build_provision_script(request):
    ...     print(statement)
    DROP DATABASE IF EXISTS "app_test"
    CREATE DATABASE "app_test" ENCODING 'UTF-8' LC_CTYPE 'en_US.UTF-8' LC_COLLATE 'en_US.UTF-8' TEMPLATE template0
    GRANT ALL PRIVILEGES ON DATABASE "app_test" TO "dev"
"""

import re
from typing import List

from core.engines import Engine
from models.provision_models import ProvisionRequest

SAFE_IDENTIFIER = re.compile(r'[A-Za-z0-9_]+')


class UnsafeIdentifierError(ValueError):
    """Exception raised when a name cannot be embedded in SQL safely.

    Attributes:
        kind: What the name identifies (e.g. 'database name')
        value: The rejected value
    """

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(
            f"Invalid {kind} [{value}]: only letters, digits and underscores are allowed"
        )


def validate_identifier(value: str, kind: str = 'identifier') -> str:
    """Check that a name only uses [A-Za-z0-9_].

    Args:
        value: Name to check
        kind: Description used in the error message

    Returns:
        The unchanged value

    Raises:
        UnsafeIdentifierError: If the value is empty or has other characters
    """
    if not value or not SAFE_IDENTIFIER.fullmatch(value):
        raise UnsafeIdentifierError(kind, value)
    return value


def quote_literal(value: str, engine: Engine) -> str:
    """Render a value as a single-quoted SQL string literal."""
    escaped = value.replace('\\', '\\\\') if engine.escape_backslashes else value
    return "'" + escaped.replace("'", "''") + "'"


def drop_database_sql(engine: Engine, database_name: str, force: bool = False) -> str:
    """
    Generate DROP DATABASE IF EXISTS statement.

    Args:
        engine: Target engine
        database_name: Database to drop
        force: Terminate open sessions first where the engine supports it

    Returns:
        SQL DROP DATABASE statement
    """
    validate_identifier(database_name, 'database name')
    sql = engine.drop_template.format(database=database_name)
    if force and engine.force_drop_suffix:
        sql += engine.force_drop_suffix
    return sql


def create_database_sql(engine: Engine, database_name: str) -> str:
    """
    Generate CREATE DATABASE statement with the engine's UTF-8 settings.

    Args:
        engine: Target engine
        database_name: Database to create

    Returns:
        SQL CREATE DATABASE statement
    """
    validate_identifier(database_name, 'database name')
    return engine.create_template.format(database=database_name)


def grant_privileges_sql(
    engine: Engine,
    database_name: str,
    username: str,
    password: str
) -> List[str]:
    """
    Generate statements granting all privileges on a database to a user.

    Engines with host-qualified users get one grant per host pattern,
    each preceded by the statements creating that user if needed and
    setting its password, so a changed password is applied on re-runs.

    Args:
        engine: Target engine
        database_name: Database to grant on
        username: Application user
        password: Application user password

    Returns:
        Ordered list of SQL statements
    """
    validate_identifier(database_name, 'database name')
    validate_identifier(username, 'username')

    if not engine.grant_hosts:
        return [engine.grant_template.format(database=database_name, username=username)]

    literal = quote_literal(password, engine)
    statements = []
    for host in engine.grant_hosts:
        if engine.ensure_user_template:
            statements.append(engine.ensure_user_template.format(
                username=username,
                host=host,
                password=literal
            ))
        if engine.set_password_template:
            statements.append(engine.set_password_template.format(
                username=username,
                host=host,
                password=literal
            ))
        statements.append(engine.grant_template.format(
            database=database_name,
            username=username,
            host=host
        ))
    return statements


def build_provision_script(request: ProvisionRequest, force_drop: bool = False) -> List[str]:
    """
    Build the ordered drop/create/grant script for one engine.

    All names are validated before any statement is produced.

    Args:
        request: Resolved provisioning request
        force_drop: Add the engine's forced-drop clause

    Returns:
        Ordered list of SQL statements

    Raises:
        UnsafeIdentifierError: If the database or user name is unsafe
    """
    validate_identifier(request.database_name, 'database name')
    validate_identifier(request.app_username, 'username')

    engine = request.engine
    statements = [
        drop_database_sql(engine, request.database_name, force=force_drop),
        create_database_sql(engine, request.database_name),
    ]
    statements.extend(grant_privileges_sql(
        engine,
        request.database_name,
        request.app_username,
        request.app_password
    ))
    return statements
