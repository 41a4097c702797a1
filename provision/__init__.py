"""
========================================================
Provisioning package for multi-engine databases.
========================================================

Resets named databases (and their test counterparts) on MySQL and
PostgreSQL: drop if present, recreate with UTF-8 settings, and grant
the application user full privileges.

Modules:
    credentials: Superuser credentials loaded from a key-value file
    naming: Primary and test database name resolution
    provision_orchestrator: Per-engine provisioning and result aggregation

Architecture:
    - Configuration: core/config.py (explicit ProvisionConfig value)
    - Engine catalog and dialects: core/engines.py
    - SQL generation: sql/ddl.py
    - Execution: utils/database_utils.py

Example:
    >>> from core.config import ProvisionConfig
    >>> from provision import ProvisionOrchestrator
    >>>
    >>> orchestrator = ProvisionOrchestrator(ProvisionConfig.from_env())
    >>> report = orchestrator.provision_primary()

Requirements:
    - SQLAlchemy >= 2.0.0
    - psycopg2-binary >= 2.9.0
    - PyMySQL >= 1.0.0
    - python-dotenv >= 1.0.0
"""

__version__ = "0.1.0"
__all__ = [
    'CredentialError',
    'ProvisionOrchestrator',
    'resolve_primary',
    'resolve_test',
]

from .credentials import CredentialError
from .naming import resolve_primary, resolve_test
from .provision_orchestrator import ProvisionOrchestrator
