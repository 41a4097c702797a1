"""
=====================================================
Provisioning orchestrator for multi-engine databases.
=====================================================

Coordinates the drop/create/grant process for the primary database or
the test database across every configured engine.

Per invocation the orchestrator:
    1. Resolves the effective database name (provision.naming)
    2. Validates that engines are configured
    3. Loads the superuser credentials file once (provision.credentials)
    4. For each engine, in configuration order: looks up the engine,
       requires its credentials, builds the script (sql.ddl) and runs it
       on the admin database (utils.database_utils)
    5. Collects one ProvisionResult per engine into a ProvisionReport

A failing engine never stops the others unless fail_fast is set.
Nothing is retried: a partially applied drop/create/grant is reported
for the operator to re-run.

Example:
    >>> from core.config import ProvisionConfig
    >>> from provision.provision_orchestrator import ProvisionOrchestrator
    >>>
    >>> cfg = ProvisionConfig(engines=('mysql', 'postgresql'), project_identifier='my.app')
    >>> orchestrator = ProvisionOrchestrator(cfg)
    >>> report = orchestrator.provision_test()
    >>> report.exit_code
    0
"""

from typing import Callable, Dict, List, Mapping, Optional

from core.config import ConfigurationError, ProvisionConfig
from core.engines import lookup
from core.logger import get_logger
from models.provision_models import (
    Credentials,
    FailureKind,
    ProvisionReport,
    ProvisionRequest,
    ProvisionResult,
)
from provision import credentials as credential_store
from provision.credentials import CredentialError
from provision.naming import resolve_primary, resolve_test
from sql.ddl import UnsafeIdentifierError, build_provision_script
from utils.database_utils import DatabaseConnectionError, StatementError, execute_statements

logger = get_logger(__name__)

PRIMARY = 'primary'
TEST = 'test'

CredentialLoader = Callable[..., Mapping[str, Credentials]]


class ProvisionOrchestrator:
    """Provision the primary or test database on every configured engine.

    Attributes:
        config: Immutable provisioning configuration
        credential_loader: Callable loading the credentials file
        executor: Callable running a statement batch on an engine

    Example:
        >>> orchestrator = ProvisionOrchestrator(cfg)
        >>> for report in orchestrator.provision_all():
        ...     print(report.operation, report.succeeded)
    """

    def __init__(
        self,
        config: ProvisionConfig,
        credential_loader: Optional[CredentialLoader] = None,
        executor: Optional[Callable[..., None]] = None
    ):
        self.config = config
        self.credential_loader = credential_loader or credential_store.load
        self.executor = executor or execute_statements

    @property
    def primary_name(self) -> str:
        return resolve_primary(self.config.primary_name, self.config.project_identifier)

    @property
    def test_name(self) -> str:
        return resolve_test(
            self.config.test_name,
            self.config.primary_name,
            self.config.project_identifier
        )

    def provision_primary(self) -> ProvisionReport:
        """Drop and recreate the primary database on every engine.

        Returns:
            ProvisionReport with one result per attempted engine

        Raises:
            ConfigurationError: If no engines are configured or the
                database name resolves to an empty string
        """
        return self._provision(PRIMARY, self.primary_name)

    def provision_test(self) -> ProvisionReport:
        """Drop and recreate the test database on every engine.

        Returns:
            ProvisionReport with one result per attempted engine

        Raises:
            ConfigurationError: If no engines are configured or the
                database name resolves to an empty string
        """
        return self._provision(TEST, self.test_name)

    def provision_all(self) -> List[ProvisionReport]:
        """Provision the primary database, then the test database."""
        return [self.provision_primary(), self.provision_test()]

    def _provision(self, operation: str, database_name: str) -> ProvisionReport:
        self.config.validate()
        if not database_name:
            raise ConfigurationError(
                f"The {operation} database name resolved to an empty string. "
                f"Set a database name or a project identifier."
            )

        logger.info(
            f"Provisioning {operation} database [{database_name}] on: "
            f"{', '.join(self.config.engines)}"
        )

        store: Dict[str, Credentials] = {}
        store_error: Optional[CredentialError] = None
        try:
            store = dict(self.credential_loader(self.config.credentials_file))
        except CredentialError as e:
            logger.error(str(e))
            store_error = e

        results = []
        for engine_id in self.config.engines:
            result = self._provision_engine(engine_id, database_name, store, store_error)
            results.append(result)

            if not result.success and self.config.fail_fast:
                skipped = self.config.engines[len(results):]
                if skipped:
                    logger.warning(f"Fail-fast: not attempting {', '.join(skipped)}")
                break

        report = ProvisionReport(
            operation=operation,
            database_name=database_name,
            results=tuple(results)
        )
        self._log_summary(report)
        return report

    def _provision_engine(
        self,
        engine_id: str,
        database_name: str,
        store: Mapping[str, Credentials],
        store_error: Optional[CredentialError]
    ) -> ProvisionResult:
        """Provision one engine, converting every error into a result."""
        try:
            engine = lookup(engine_id)
            engine_id = engine.engine_id

            if store_error is not None:
                raise CredentialError(str(store_error))
            creds = credential_store.require(store, engine_id, self.config.credentials_file)

            request = ProvisionRequest(
                engine=engine,
                database_name=database_name,
                app_username=self.config.app_username,
                app_password=self.config.app_password
            )
            statements = build_provision_script(request, force_drop=self.config.force_drop)

            logger.info(f"Creating {engine.display_name} database [{database_name}]")
            self.executor(
                engine,
                statements,
                creds,
                autocommit=self.config.autocommit,
                connect_timeout=self.config.connect_timeout,
                statement_timeout=self.config.statement_timeout,
                target_database=database_name
            )

        except ConfigurationError as e:
            return self._failed(engine_id, database_name, FailureKind.CONFIGURATION, e)
        except CredentialError as e:
            return self._failed(engine_id, database_name, FailureKind.CREDENTIAL, e)
        except UnsafeIdentifierError as e:
            return self._failed(engine_id, database_name, FailureKind.UNSAFE_IDENTIFIER, e)
        except DatabaseConnectionError as e:
            return self._failed(engine_id, database_name, FailureKind.CONNECTION, e)
        except StatementError as e:
            return self._failed(engine_id, database_name, FailureKind.STATEMENT, e)

        logger.info(f"{engine.display_name} database [{database_name}] is ready")
        return ProvisionResult.ok(engine_id, database_name)

    def _failed(
        self,
        engine_id: str,
        database_name: str,
        kind: FailureKind,
        error: Exception
    ) -> ProvisionResult:
        logger.error(f"Provisioning {engine_id} database [{database_name}] failed: {error}")
        return ProvisionResult.failed(engine_id, database_name, kind, str(error))

    def _log_summary(self, report: ProvisionReport) -> None:
        for result in report.results:
            if result.success:
                logger.info(f"  ✅ {result.describe()}")
            else:
                logger.error(f"  ❌ {result.describe()}")

        if report.succeeded:
            logger.info(f"{report.operation.capitalize()} database [{report.database_name}] provisioned")
        else:
            logger.error(
                f"{report.operation.capitalize()} database [{report.database_name}]: "
                f"{len(report.failures)} of {len(report.results)} engines failed"
            )
