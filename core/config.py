"""
================================================
Configuration management for the provisioner.
================================================

Holds the caller-supplied provisioning configuration as an immutable value
and knows how to build one from environment variables (.env file).

Nothing here is global: a ProvisionConfig is created once at start-up and
passed explicitly into the orchestrator.

Example:
    >>> from core.config import ProvisionConfig
    >>>
    >>> # Explicit configuration
    >>> cfg = ProvisionConfig(engines=('mysql', 'postgresql'), project_identifier='my.app')
    >>>
    >>> # From .env / environment, with overrides
    >>> cfg = ProvisionConfig.from_env(env_file='.env', fail_fast=True)
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from dotenv import load_dotenv

CREDENTIALS_FILE_ENV = 'DBPROVISION_CREDENTIALS_FILE'

DEFAULT_APP_USERNAME = 'dev'
DEFAULT_APP_PASSWORD = 'dev'
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_STATEMENT_TIMEOUT = 60


class ConfigurationError(Exception):
    """Exception raised for invalid or incomplete provisioning configuration.

    Raised when no engines are requested, an engine id is unknown, a
    resolved database name is empty, or an environment value cannot be
    converted.
    """
    pass


def default_credentials_path() -> Path:
    """Get the superuser credentials file location.

    Uses DBPROVISION_CREDENTIALS_FILE when set, otherwise the
    properties file under the Gradle user home that existing
    installations already maintain.
    """
    override = os.getenv(CREDENTIALS_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / '.gradle' / 'plugins' / 'database.properties'


def parse_engine_list(value: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Normalize an engine list into a tuple of ids.

    Accepts a comma/whitespace separated string or any iterable of ids.
    Blank entries are dropped and order is preserved.

    Example:
        >>> parse_engine_list('mysql, postgresql')
        ('mysql', 'postgresql')
    """
    if value is None:
        return ()
    if isinstance(value, str):
        items = re.split(r'[,\s]+', value)
    else:
        items = list(value)
    return tuple(item.strip() for item in items if item and item.strip())


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got [{raw}]") from None


@dataclass(frozen=True)
class ProvisionConfig:
    """Provisioning configuration settings.

    Attributes:
        engines: Engine ids to provision, in order
        project_identifier: Project name used to derive database names
        primary_name: Explicit primary database name
        test_name: Explicit test database name
        app_username: Application user granted access to the database
        app_password: Password for the application user
        credentials_file: Superuser credentials properties file
        connect_timeout: Seconds allowed for each connection attempt
        statement_timeout: Seconds allowed for each statement
        autocommit: Run each statement in its own transaction
        fail_fast: Stop at the first engine that fails
        force_drop: Terminate open sessions when dropping (PostgreSQL 13+)
    """

    engines: Tuple[str, ...] = ()
    project_identifier: str = ''
    primary_name: Optional[str] = None
    test_name: Optional[str] = None
    app_username: str = DEFAULT_APP_USERNAME
    app_password: str = field(default=DEFAULT_APP_PASSWORD, repr=False)
    credentials_file: Path = field(default_factory=default_credentials_path)
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    statement_timeout: int = DEFAULT_STATEMENT_TIMEOUT
    autocommit: bool = True
    fail_fast: bool = False
    force_drop: bool = False

    def __post_init__(self):
        # Frozen, so normalize through object.__setattr__
        object.__setattr__(self, 'engines', parse_engine_list(self.engines))
        object.__setattr__(self, 'credentials_file', Path(self.credentials_file).expanduser())

    def validate(self) -> None:
        """Check the settings needed before any provisioning starts.

        Raises:
            ConfigurationError: If no engines are requested or a timeout
                is not positive
        """
        if not self.engines:
            raise ConfigurationError(
                "The project must define the database types it uses. "
                "Set DB_ENGINES (or --engines) to a list such as: mysql,postgresql"
            )
        if self.connect_timeout <= 0 or self.statement_timeout <= 0:
            raise ConfigurationError("Connection and statement timeouts must be positive")

    def with_overrides(self, **overrides) -> 'ProvisionConfig':
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None, **overrides) -> 'ProvisionConfig':
        """Build configuration from environment variables.

        Loads the given .env file (or ./.env when present) without
        overriding variables already set in the process environment.

        Args:
            env_file: Optional path to a .env file
            **overrides: Field values that take precedence over the
                environment (None values are ignored)

        Returns:
            ProvisionConfig instance

        Raises:
            ConfigurationError: If a numeric setting is malformed
        """
        env_path = Path(env_file) if env_file else Path.cwd() / '.env'
        load_dotenv(dotenv_path=env_path)

        base = cls(
            engines=parse_engine_list(os.getenv('DB_ENGINES')),
            project_identifier=os.getenv('PROJECT_NAME') or Path.cwd().name,
            primary_name=os.getenv('DB_NAME') or None,
            test_name=os.getenv('DB_TEST_NAME') or None,
            app_username=os.getenv('DB_APP_USERNAME', DEFAULT_APP_USERNAME),
            app_password=os.getenv('DB_APP_PASSWORD', DEFAULT_APP_PASSWORD),
            credentials_file=default_credentials_path(),
            connect_timeout=_env_int('DB_CONNECT_TIMEOUT', DEFAULT_CONNECT_TIMEOUT),
            statement_timeout=_env_int('DB_STATEMENT_TIMEOUT', DEFAULT_STATEMENT_TIMEOUT),
        )
        return base.with_overrides(**overrides)
