"""
==========================
Utility Functions Package.
==========================

Database connectivity and batch execution helpers used by the
provisioning orchestrator.

Modules:
    database_utils: Admin-database connections and statement execution
"""

__version__ = "1.0.0"
__all__ = [
    'DatabaseConnectionError',
    'StatementError',
    'build_connection_url',
    'create_admin_engine',
    'execute_statements',
]

from .database_utils import (
    DatabaseConnectionError,
    StatementError,
    build_connection_url,
    create_admin_engine,
    execute_statements,
)
