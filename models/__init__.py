"""
========================================
Value models for database provisioning
========================================

Immutable data passed between the credential store, script builder,
executor and orchestrator. Kept apart from the logic packages so every
layer can import them without circular dependencies.

Modules:
    provision_models: Credentials, requests, results and reports

Example:
    >>> from models import Credentials, ProvisionResult
    >>> creds = Credentials(username='root', password='secret')
"""

__version__ = "0.1.0"
__all__ = [
    'Credentials',
    'FailureKind',
    'ProvisionReport',
    'ProvisionRequest',
    'ProvisionResult',
]

from .provision_models import (
    Credentials,
    FailureKind,
    ProvisionReport,
    ProvisionRequest,
    ProvisionResult,
)
