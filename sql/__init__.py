"""
====================================================
SQL generation package for database provisioning.
====================================================

Pure functions rendering the engine-specific DDL used to reset a
database. Execution lives in utils.database_utils.

Modules:
    ddl: Drop/create/grant statement generation and identifier checks

Example:
    >>> from sql.ddl import build_provision_script, validate_identifier
    >>> validate_identifier('app_test', 'database name')
    'app_test'
"""

__version__ = "1.0.0"
__all__ = [
    'UnsafeIdentifierError',
    'build_provision_script',
    'create_database_sql',
    'drop_database_sql',
    'grant_privileges_sql',
    'quote_literal',
    'validate_identifier',
]

from .ddl import (
    UnsafeIdentifierError,
    build_provision_script,
    create_database_sql,
    drop_database_sql,
    grant_privileges_sql,
    quote_literal,
    validate_identifier,
)
