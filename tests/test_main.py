"""
===============================================
Pytest suite for main.py
===============================================

Sections:
---------
1. Unit tests - argument parsing and configuration building
2. CLI tests - exit code handling
3. Smoke tests

Test Coverage:
--------------
main() CLI:
- Target selection (--primary, --test, --all), mutually exclusive and required
- Overrides flowing into ProvisionConfig
- Exit code handling (success=0, failure=1, configuration error=1, interrupt=130)

How to Execute:
---------------
All tests:          pytest tests/test_main.py -v
By category:        pytest tests/test_main.py -m unit
"""

from unittest.mock import patch

import pytest

from core.config import ConfigurationError
from main import build_parser, config_from_args, main
from models.provision_models import FailureKind, ProvisionReport, ProvisionResult

# ====================
# Mock Helper Classes
# ====================

def make_report(operation, success=True):
    if success:
        result = ProvisionResult.ok('mysql', f'app_{operation}')
    else:
        result = ProvisionResult.failed('mysql', f'app_{operation}', FailureKind.CONNECTION, 'refused')
    return ProvisionReport(operation=operation, database_name=f'app_{operation}', results=(result,))


class FakeOrchestrator:
    """Mock ProvisionOrchestrator recording which operation ran."""
    instances = []

    def __init__(self, config, primary_ok=True, test_ok=True, error=None):
        self.config = config
        self.calls = []
        self.primary_ok = primary_ok
        self.test_ok = test_ok
        self.error = error
        FakeOrchestrator.instances.append(self)

    def provision_primary(self):
        self.calls.append('primary')
        if self.error:
            raise self.error
        return make_report('primary', self.primary_ok)

    def provision_test(self):
        self.calls.append('test')
        if self.error:
            raise self.error
        return make_report('test', self.test_ok)

    def provision_all(self):
        return [self.provision_primary(), self.provision_test()]


@pytest.fixture
def fake_orchestrator():
    """Patch main.ProvisionOrchestrator and logging setup."""
    FakeOrchestrator.instances = []

    def install(**behaviour):
        factory = lambda config: FakeOrchestrator(config, **behaviour)
        patcher = patch('main.ProvisionOrchestrator', side_effect=factory)
        patcher.start()
        return FakeOrchestrator.instances

    with patch('main.setup_logging'):
        yield install
    patch.stopall()


@pytest.fixture
def base_args(clean_env, tmp_path):
    """Arguments pointing at a non-existent .env file."""
    return ['--env-file', str(tmp_path / 'missing.env'), '--engines', 'mysql', '--project', 'app']


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_parser_requires_a_target():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])
    assert exc_info.value.code == 2


@pytest.mark.unit
def test_parser_targets_are_mutually_exclusive():
    with pytest.raises(SystemExit):
        build_parser().parse_args(['--primary', '--test'])


@pytest.mark.unit
def test_config_from_args_applies_overrides(base_args, tmp_path):
    args = build_parser().parse_args(base_args + [
        '--primary',
        '--name', 'shop',
        '--test-name', 'shop_it',
        '--app-user', 'shop_app',
        '--credentials-file', str(tmp_path / 'creds.properties'),
        '--connect-timeout', '3',
        '--fail-fast',
    ])

    cfg = config_from_args(args)

    assert cfg.engines == ('mysql',)
    assert cfg.project_identifier == 'app'
    assert cfg.primary_name == 'shop'
    assert cfg.test_name == 'shop_it'
    assert cfg.app_username == 'shop_app'
    assert cfg.app_password == 'dev'
    assert cfg.credentials_file == tmp_path / 'creds.properties'
    assert cfg.connect_timeout == 3
    assert cfg.fail_fast is True
    assert cfg.force_drop is False


# ==============
# 2. CLI TESTS
# ==============

@pytest.mark.integration
def test_main_primary_success(fake_orchestrator, base_args, capsys):
    instances = fake_orchestrator()

    assert main(base_args + ['--primary']) == 0
    assert instances[0].calls == ['primary']
    assert 'PRIMARY database [app_primary]: OK' in capsys.readouterr().out


@pytest.mark.integration
def test_main_test_failure_returns_one(fake_orchestrator, base_args, capsys):
    instances = fake_orchestrator(test_ok=False)

    assert main(base_args + ['--test']) == 1
    assert instances[0].calls == ['test']
    assert 'FAILED (connection) - refused' in capsys.readouterr().out


@pytest.mark.integration
def test_main_all_runs_both_and_fails_if_any_fails(fake_orchestrator, base_args):
    instances = fake_orchestrator(primary_ok=False)

    assert main(base_args + ['--all']) == 1
    assert instances[0].calls == ['primary', 'test']


@pytest.mark.integration
def test_main_configuration_error_returns_one(fake_orchestrator, base_args):
    fake_orchestrator(error=ConfigurationError('no engines'))
    assert main(base_args + ['--primary']) == 1


@pytest.mark.integration
def test_main_keyboard_interrupt_returns_130(fake_orchestrator, base_args):
    fake_orchestrator(error=KeyboardInterrupt())
    assert main(base_args + ['--test']) == 130


@pytest.mark.integration
def test_main_verbose_sets_debug_logging(base_args):
    with patch('main.setup_logging') as mock_setup, \
            patch('main.ProvisionOrchestrator', side_effect=lambda cfg: FakeOrchestrator(cfg)):
        main(base_args + ['--primary', '--verbose', '--log-file', 'provision.log'])

    mock_setup.assert_called_once_with(log_level='DEBUG', log_file='provision.log')


# ===============
# 3. SMOKE TESTS
# ===============

@pytest.mark.smoke
def test_main_without_engines_reports_configuration_error(clean_env, tmp_path):
    argv = ['--env-file', str(tmp_path / 'missing.env'), '--project', 'app', '--primary']

    with patch('main.setup_logging'):
        assert main(argv) == 1
