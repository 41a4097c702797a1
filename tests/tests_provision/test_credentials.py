"""
==============================================
Pytest suite for provision/credentials.py
==============================================

Sections:
---------
1. Unit tests
2. Edge case tests

Test Coverage:
--------------
- load: missing file, complete and partial entries, literal values,
  properties separators and comments, directories, unreadable and
  malformed files
- require: present and missing engines

How to Execute:
---------------
All tests:          python -m pytest tests/tests_provision/test_credentials.py -v
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from models.provision_models import Credentials
from provision.credentials import CredentialError, load, require


@pytest.fixture
def write_credentials(tmp_path):
    """Write a credentials file and return its path."""
    def _write(content, name='database.properties'):
        path = tmp_path / name
        path.write_text(content, encoding='utf-8')
        return path
    return _write


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_load_missing_file_returns_empty_mapping(tmp_path):
    assert load(tmp_path / 'nope.properties') == {}


@pytest.mark.unit
def test_load_single_engine(write_credentials):
    path = write_credentials("mysql.db.username=root\nmysql.db.password=secret\n")

    assert load(path) == {'mysql': Credentials(username='root', password='secret')}


@pytest.mark.unit
def test_load_both_engines_with_comments(write_credentials):
    path = write_credentials(
        "# superuser logins\n"
        "mysql.db.username=root\n"
        "mysql.db.password=secret\n"
        "\n"
        "postgresql.db.username=postgres\n"
        "postgresql.db.password=pg_secret\n"
    )

    store = load(path)

    assert store['mysql'] == Credentials('root', 'secret')
    assert store['postgresql'] == Credentials('postgres', 'pg_secret')


@pytest.mark.unit
def test_load_skips_engine_with_only_username(write_credentials):
    path = write_credentials(
        "mysql.db.username=root\n"
        "postgresql.db.username=postgres\n"
        "postgresql.db.password=pw\n"
    )

    store = load(path)

    assert 'mysql' not in store
    assert store['postgresql'].username == 'postgres'


@pytest.mark.unit
def test_load_ignores_unrelated_keys(write_credentials):
    path = write_credentials("other.setting=1\nmysql.db.url=x\n")
    assert load(path) == {}


@pytest.mark.unit
def test_require_returns_credentials():
    store = {'mysql': Credentials('root', 'secret')}
    assert require(store, 'mysql', 'db.properties') == Credentials('root', 'secret')


@pytest.mark.unit
def test_require_missing_engine_names_keys_and_file():
    with pytest.raises(CredentialError) as exc_info:
        require({}, 'postgresql', '/home/dev/.gradle/plugins/database.properties')

    message = str(exc_info.value)
    assert '[postgresql.db.username]' in message
    assert '[postgresql.db.password]' in message
    assert '/home/dev/.gradle/plugins/database.properties' in message


# ===================
# 2. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_load_keeps_values_literal(write_credentials):
    path = write_credentials("mysql.db.username=root\nmysql.db.password=pa$${HOME}=x\n")
    assert load(path)['mysql'].password == 'pa$${HOME}=x'


@pytest.mark.edge_case
def test_load_allows_empty_password(write_credentials):
    path = write_credentials("mysql.db.username=root\nmysql.db.password=\n")
    assert load(path)['mysql'] == Credentials('root', '')


@pytest.mark.edge_case
def test_load_directory_is_credential_error(tmp_path):
    with pytest.raises(CredentialError, match='directory'):
        load(tmp_path)


@pytest.mark.edge_case
def test_load_unreadable_file_is_credential_error(write_credentials):
    path = write_credentials("mysql.db.username=root\n")

    with patch.object(Path, 'read_text', side_effect=PermissionError('Permission denied')):
        with pytest.raises(CredentialError, match='Permission denied'):
            load(path)


@pytest.mark.edge_case
def test_load_malformed_line_is_credential_error(write_credentials):
    path = write_credentials("mysql.db.username=root\nbroken line without separator\n")

    with pytest.raises(CredentialError, match='Malformed line 2'):
        load(path)


@pytest.mark.edge_case
def test_credentials_repr_hides_password():
    assert 'secret' not in repr(Credentials('root', 'secret'))


@pytest.mark.edge_case
def test_load_keeps_hash_after_space_in_password(write_credentials):
    path = write_credentials("mysql.db.username=root\nmysql.db.password=abc #def\n")
    assert load(path)['mysql'].password == 'abc #def'


@pytest.mark.edge_case
def test_load_keeps_surrounding_quotes(write_credentials):
    path = write_credentials("mysql.db.username=root\nmysql.db.password=\"quoted\"\n")
    assert load(path)['mysql'].password == '"quoted"'


@pytest.mark.edge_case
def test_load_accepts_colon_separator_and_bang_comments(write_credentials):
    path = write_credentials(
        "! superuser logins\n"
        "mysql.db.username: root\n"
        "  mysql.db.password = s3:cr=t\n"
    )
    assert load(path)['mysql'] == Credentials('root', 's3:cr=t')


@pytest.mark.edge_case
def test_load_empty_key_is_credential_error(write_credentials):
    path = write_credentials("=value\n")

    with pytest.raises(CredentialError, match='Malformed line 1'):
        load(path)
