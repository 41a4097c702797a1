"""
==================================================
Database engine catalog for provisioning.
==================================================

Static registry of the database engines the provisioner can target, with
their connection defaults and the dialect templates used to drop, create and
grant access to a database.

The registry is the single source of truth for:
    - SQLAlchemy driver names and default ports
    - The administrative database used to issue DROP/CREATE
    - Connection URL construction (host is always localhost)
    - Dialect-specific statement templates

Example:
    >>> from core.engines import lookup
    >>>
    >>> engine = lookup('postgresql')
    >>> engine.default_port
    5432
    >>> engine.display_url('app_test')
    'postgresql://localhost:5432/app_test'
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sqlalchemy.engine import URL

from core.config import ConfigurationError

LOCALHOST = 'localhost'


class UnknownEngineError(ConfigurationError):
    """Exception raised when an engine id is not in the catalog."""
    pass


@dataclass(frozen=True)
class Engine:
    """Immutable descriptor for a supported database engine.

    Attributes:
        engine_id: Identifier used in configuration and credential keys
        display_name: Human readable product name for log output
        protocol: URL scheme shown in log lines
        driver: SQLAlchemy driver name used to connect
        default_port: TCP port the server listens on
        admin_db: Always-present database used for DROP/CREATE
        drop_template: DROP DATABASE statement template
        create_template: CREATE DATABASE statement template
        grant_template: GRANT statement template
        ensure_user_template: Optional statement creating the user before each grant
        set_password_template: Optional statement resetting an existing user's password
        grant_hosts: Host patterns needing their own grant (empty if the
            engine has no host-qualified user identity)
        force_drop_suffix: Suffix that terminates open sessions on drop
        escape_backslashes: Whether string literals treat backslash as escape
    """

    engine_id: str
    display_name: str
    protocol: str
    driver: str
    default_port: int
    admin_db: str
    drop_template: str
    create_template: str
    grant_template: str
    ensure_user_template: Optional[str] = None
    set_password_template: Optional[str] = None
    grant_hosts: Tuple[str, ...] = ()
    force_drop_suffix: Optional[str] = None
    escape_backslashes: bool = False

    def connection_url(
        self,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None
    ) -> URL:
        """Build a SQLAlchemy URL for a database on the local server.

        Args:
            database: Database to connect to (defaults to admin_db)
            username: Login user
            password: Login password

        Returns:
            SQLAlchemy URL object
        """
        return URL.create(
            drivername=self.driver,
            username=username,
            password=password,
            host=LOCALHOST,
            port=self.default_port,
            database=database or self.admin_db
        )

    def display_url(self, database: Optional[str] = None) -> str:
        """Render a credential-free URL for log lines."""
        return f"{self.protocol}://{LOCALHOST}:{self.default_port}/{database or self.admin_db}"


MYSQL = Engine(
    engine_id='mysql',
    display_name='MySQL',
    protocol='mysql',
    driver='mysql+pymysql',
    default_port=3306,
    admin_db='mysql',
    drop_template="DROP DATABASE IF EXISTS `{database}`",
    create_template="CREATE DATABASE `{database}` CHARACTER SET utf8 COLLATE utf8_bin",
    grant_template="GRANT ALL PRIVILEGES ON `{database}`.* TO '{username}'@'{host}'",
    ensure_user_template="CREATE USER IF NOT EXISTS '{username}'@'{host}' IDENTIFIED BY {password}",
    set_password_template="ALTER USER '{username}'@'{host}' IDENTIFIED BY {password}",
    grant_hosts=('localhost', '127.0.0.1'),
    escape_backslashes=True
)

POSTGRESQL = Engine(
    engine_id='postgresql',
    display_name='PostgreSQL',
    protocol='postgresql',
    driver='postgresql+psycopg2',
    default_port=5432,
    admin_db='postgres',
    drop_template='DROP DATABASE IF EXISTS "{database}"',
    create_template=(
        'CREATE DATABASE "{database}" '
        "ENCODING 'UTF-8' LC_CTYPE 'en_US.UTF-8' "
        "LC_COLLATE 'en_US.UTF-8' TEMPLATE template0"
    ),
    grant_template='GRANT ALL PRIVILEGES ON DATABASE "{database}" TO "{username}"',
    force_drop_suffix=" WITH (FORCE)"
)

ENGINES: Dict[str, Engine] = {
    MYSQL.engine_id: MYSQL,
    POSTGRESQL.engine_id: POSTGRESQL,
}


def supported_engines() -> Tuple[str, ...]:
    """Return the ids of all catalogued engines in catalog order."""
    return tuple(ENGINES)


def lookup(engine_id: str) -> Engine:
    """Look up an engine descriptor by id.

    Args:
        engine_id: Engine identifier (case-insensitive, e.g. 'mysql')

    Returns:
        Matching Engine descriptor

    Raises:
        UnknownEngineError: If the id is not catalogued
    """
    key = (engine_id or '').strip().lower()
    try:
        return ENGINES[key]
    except KeyError:
        raise UnknownEngineError(
            f"Unknown database engine [{engine_id}]. "
            f"Supported engines: {', '.join(supported_engines())}"
        ) from None
