"""
===========================================================
Value models for database provisioning
===========================================================

Immutable values passed between the provisioning components.

Models:
    Credentials: Superuser login for one engine
    ProvisionRequest: Fully resolved input to script generation
    FailureKind: Category of a per-engine failure
    ProvisionResult: Outcome of provisioning one engine
    ProvisionReport: Ordered outcomes of one invocation

Example:
    >>> from models.provision_models import ProvisionResult, ProvisionReport
    >>>
    >>> report = ProvisionReport(
    ...     operation='test',
    ...     database_name='app_test',
    ...     results=(ProvisionResult.ok('mysql', 'app_test'),)
    ... )
    >>> report.exit_code
    0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from core.engines import Engine


@dataclass(frozen=True)
class Credentials:
    """Superuser username/password pair scoped to one engine."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ProvisionRequest:
    """Resolved input for building one engine's provisioning script.

    Attributes:
        engine: Target engine descriptor
        database_name: Database to drop and recreate
        app_username: Application user to grant privileges to
        app_password: Application user password
    """

    engine: Engine
    database_name: str
    app_username: str
    app_password: str = field(repr=False)


class FailureKind(str, Enum):
    """Why provisioning an engine failed."""

    CONFIGURATION = 'configuration'
    CREDENTIAL = 'credential'
    UNSAFE_IDENTIFIER = 'unsafe_identifier'
    CONNECTION = 'connection'
    STATEMENT = 'statement'


@dataclass(frozen=True)
class ProvisionResult:
    """Outcome of provisioning a single engine.

    Attributes:
        engine_id: Engine the result belongs to
        database_name: Database that was targeted
        success: True when every statement ran
        failure_kind: Category of failure (None on success)
        reason: Error detail, including the native driver message
    """

    engine_id: str
    database_name: str
    success: bool
    failure_kind: Optional[FailureKind] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, engine_id: str, database_name: str) -> 'ProvisionResult':
        return cls(engine_id=engine_id, database_name=database_name, success=True)

    @classmethod
    def failed(
        cls,
        engine_id: str,
        database_name: str,
        kind: FailureKind,
        reason: str
    ) -> 'ProvisionResult':
        return cls(
            engine_id=engine_id,
            database_name=database_name,
            success=False,
            failure_kind=kind,
            reason=reason
        )

    def describe(self) -> str:
        """One-line summary for console output."""
        if self.success:
            return f"{self.engine_id}: database [{self.database_name}] provisioned"
        return f"{self.engine_id}: FAILED ({self.failure_kind.value}) - {self.reason}"


@dataclass(frozen=True)
class ProvisionReport:
    """Aggregate of one provisioning invocation.

    Results keep the configured engine order. Engines skipped by
    fail-fast have no result.
    """

    operation: str
    database_name: str
    results: Tuple[ProvisionResult, ...] = ()

    @property
    def failures(self) -> Tuple[ProvisionResult, ...]:
        return tuple(result for result in self.results if not result.success)

    @property
    def succeeded(self) -> bool:
        return bool(self.results) and not self.failures

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def result_for(self, engine_id: str) -> Optional[ProvisionResult]:
        for result in self.results:
            if result.engine_id == engine_id:
                return result
        return None
