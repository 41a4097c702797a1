"""
Shared fixtures and fakes for provisioning tests.

Key fixtures:
- credentials_loader: fake CredentialStore.load returning a fixed mapping
- recording_executor: fake SqlExecutor recording every batch
- config_factory: builds ProvisionConfig with test defaults
"""

import pytest

from core.config import ProvisionConfig
from models.provision_models import Credentials

MYSQL_ROOT = Credentials(username='root', password='mysql_secret')
POSTGRES_ROOT = Credentials(username='postgres', password='pg_secret')


class RecordingExecutor:
    """
    Stand-in for utils.database_utils.execute_statements.

    Records each call and optionally raises a configured error per engine.

    Attributes:
        calls: List of dicts with engine, statements, credentials and kwargs
        errors: Mapping of engine_id to exception to raise
    """
    def __init__(self, errors=None):
        self.calls = []
        self.errors = errors or {}

    def __call__(self, engine, statements, credentials, **kwargs):
        self.calls.append({
            'engine': engine,
            'statements': list(statements),
            'credentials': credentials,
            'kwargs': kwargs
        })
        error = self.errors.get(engine.engine_id)
        if error is not None:
            raise error

    @property
    def engine_ids(self):
        return [call['engine'].engine_id for call in self.calls]


@pytest.fixture
def credentials_loader():
    """Factory for fake credential loaders returning a fixed mapping."""
    def factory(store=None, error=None):
        def loader(path):
            loader.paths.append(path)
            if error is not None:
                raise error
            return dict(store if store is not None else {
                'mysql': MYSQL_ROOT,
                'postgresql': POSTGRES_ROOT,
            })
        loader.paths = []
        return loader
    return factory


@pytest.fixture
def recording_executor():
    """Factory for RecordingExecutor instances."""
    return RecordingExecutor


@pytest.fixture
def config_factory(tmp_path):
    """Build a ProvisionConfig with a temporary credentials path."""
    def factory(**overrides):
        params = dict(
            engines=('mysql', 'postgresql'),
            project_identifier='my.app-name',
            credentials_file=tmp_path / 'database.properties'
        )
        params.update(overrides)
        return ProvisionConfig(**params)
    return factory
