"""
==================================================
Superuser credential loading for provisioning.
==================================================

Reads the per-engine superuser logins from a Java-style properties file
maintained outside this project, e.g.::

    mysql.db.username=root
    mysql.db.password=secret
    postgresql.db.username=postgres
    postgresql.db.password=secret

Each non-comment line is split on the first `=` or `:`. Keys are trimmed,
leading blanks before a value are dropped and the rest of the value is
taken literally: quotes, `#` and `$` are ordinary characters. Lines
starting with `#` or `!` are comments. A missing file is not an error;
credentials are only required for engines that are actually provisioned.

Example:
    >>> from provision.credentials import load, require
    >>>
    >>> store = load('~/.gradle/plugins/database.properties')
    >>> creds = require(store, 'mysql', '~/.gradle/plugins/database.properties')
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, Mapping, Tuple, Union

from models.provision_models import Credentials

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = re.compile(r'^(?P<engine>[A-Za-z0-9_]+)\.db\.(?P<field>username|password)$')
KEY_VALUE_SEPARATOR = re.compile(r'[=:]')
COMMENT_MARKERS = ('#', '!')


class CredentialError(Exception):
    """Exception raised when superuser credentials cannot be obtained.

    Raised when the credentials file exists but cannot be read or parsed,
    or when a requested engine has no username/password entry.
    """
    pass


def username_key(engine_id: str) -> str:
    return f"{engine_id}.db.username"


def password_key(engine_id: str) -> str:
    return f"{engine_id}.db.password"


def _read_text(path: Path) -> str:
    if path.is_dir():
        raise CredentialError(f"Credentials path {path} is a directory, not a file")
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialError(f"Cannot read credentials file {path}: {e}") from e


def _parse_properties(text: str, path: Path) -> Iterator[Tuple[str, str]]:
    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped = line.lstrip()
        if not stripped or stripped.startswith(COMMENT_MARKERS):
            continue

        separator = KEY_VALUE_SEPARATOR.search(stripped)
        key = stripped[:separator.start()].strip() if separator else ''
        if not key:
            raise CredentialError(f"Malformed line {line_number} in credentials file {path}")

        yield key, stripped[separator.end():].lstrip()


def load(path: Union[str, Path]) -> Dict[str, Credentials]:
    """
    Load superuser credentials keyed by engine id.

    Only engines with both a username and a password entry are returned.

    Args:
        path: Location of the credentials file

    Returns:
        Mapping of engine id to Credentials (empty if the file is absent)

    Raises:
        CredentialError: If the path is a directory, unreadable, or has a
            line that is not a key-value pair
    """
    path = Path(path).expanduser()
    if not path.exists():
        logger.debug(f"No credentials file at {path}")
        return {}

    entries: Dict[str, Dict[str, str]] = {}
    for key, value in _parse_properties(_read_text(path), path):
        match = CREDENTIAL_KEY.match(key)
        if match:
            entries.setdefault(match.group('engine'), {})[match.group('field')] = value

    credentials = {
        engine_id: Credentials(username=fields['username'], password=fields['password'])
        for engine_id, fields in entries.items()
        if 'username' in fields and 'password' in fields
    }
    logger.debug(f"Loaded credentials for {sorted(credentials)} from {path}")
    return credentials


def require(
    credentials: Mapping[str, Credentials],
    engine_id: str,
    path: Union[str, Path]
) -> Credentials:
    """
    Get the credentials for a requested engine.

    Args:
        credentials: Mapping returned by load()
        engine_id: Engine about to be provisioned
        path: Credentials file location (for the error message)

    Returns:
        Credentials for the engine

    Raises:
        CredentialError: If the engine has no complete entry
    """
    try:
        return credentials[engine_id]
    except KeyError:
        raise CredentialError(
            f"You must create a file named {path} and add two properties to it. "
            f"The [{username_key(engine_id)}] property should contain the superuser "
            f"username for your database instance. The [{password_key(engine_id)}] "
            f"property should contain the superuser password."
        ) from None
