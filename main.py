"""
=========================================================
Command-line entry point for database provisioning.
=========================================================

Thin CLI wrapper around ProvisionOrchestrator. Builds the configuration
from the environment (.env) plus command-line overrides, runs the
requested provisioning, prints one line per engine and maps the outcome
to an exit code.

Usage:
    # Recreate the primary database on the engines listed in DB_ENGINES
    python main.py --primary

    # Recreate the test database on both engines
    python main.py --test --engines mysql,postgresql

    # Both, stopping at the first failing engine
    python main.py --all --fail-fast --verbose

Exit codes:
    0: every engine succeeded
    1: at least one engine failed, or the configuration is invalid
    130: interrupted
"""

import argparse
import sys
from typing import List, Optional

from core.config import ConfigurationError, ProvisionConfig
from core.engines import supported_engines
from core.logger import get_logger, setup_logging
from models.provision_models import ProvisionReport
from provision.provision_orchestrator import ProvisionOrchestrator

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the provisioning CLI."""
    parser = argparse.ArgumentParser(
        description="Drop, recreate and grant access to project databases on MySQL and PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Example: python main.py --test --engines mysql,postgresql"
    )

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument('--primary', action='store_true', help='Provision the primary database')
    target.add_argument('--test', action='store_true', help='Provision the test database')
    target.add_argument('--all', action='store_true', help='Provision primary, then test database')

    parser.add_argument(
        '--engines',
        help=f"Comma separated engines (overrides DB_ENGINES). Supported: {', '.join(supported_engines())}"
    )
    parser.add_argument('--name', help='Primary database name (overrides DB_NAME)')
    parser.add_argument('--test-name', help='Test database name (overrides DB_TEST_NAME)')
    parser.add_argument('--project', help='Project identifier used to derive names (overrides PROJECT_NAME)')
    parser.add_argument('--app-user', help='Application user to grant privileges to (default: dev)')
    parser.add_argument('--app-password', help='Application user password (default: dev)')
    parser.add_argument('--credentials-file', help='Superuser credentials properties file')
    parser.add_argument('--env-file', help='Path to .env file (default: ./.env)')
    parser.add_argument('--connect-timeout', type=int, help='Seconds allowed per connection attempt')
    parser.add_argument('--statement-timeout', type=int, help='Seconds allowed per statement')
    parser.add_argument(
        '--fail-fast',
        action='store_true',
        default=None,
        help='Stop at the first failing engine'
    )
    parser.add_argument(
        '--force-drop',
        action='store_true',
        default=None,
        help='Terminate open sessions when dropping (PostgreSQL 13+)'
    )
    parser.add_argument('--verbose', action='store_true', help='Enable DEBUG logging')
    parser.add_argument('--log-file', help='Also write logs to this file under logs/')
    return parser


def config_from_args(args: argparse.Namespace) -> ProvisionConfig:
    """Build the provisioning configuration from .env plus CLI overrides."""
    return ProvisionConfig.from_env(
        env_file=args.env_file,
        engines=args.engines,
        primary_name=args.name,
        test_name=args.test_name,
        project_identifier=args.project,
        app_username=args.app_user,
        app_password=args.app_password,
        credentials_file=args.credentials_file,
        connect_timeout=args.connect_timeout,
        statement_timeout=args.statement_timeout,
        fail_fast=args.fail_fast,
        force_drop=args.force_drop
    )


def print_report(report: ProvisionReport) -> None:
    status = 'OK' if report.succeeded else 'FAILED'
    print(f"\n{report.operation.upper()} database [{report.database_name}]: {status}")
    for result in report.results:
        mark = '✓' if result.success else '✗'
        print(f"  {mark} {result.describe()}")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the provisioning CLI.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level='DEBUG' if args.verbose else 'INFO',
        log_file=args.log_file
    )

    try:
        orchestrator = ProvisionOrchestrator(config_from_args(args))

        if args.primary:
            reports = [orchestrator.provision_primary()]
        elif args.test:
            reports = [orchestrator.provision_test()]
        else:
            reports = orchestrator.provision_all()

        for report in reports:
            print_report(report)

        return 0 if all(report.succeeded for report in reports) else 1

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Provisioning interrupted")
        return 130


if __name__ == '__main__':
    sys.exit(main())
