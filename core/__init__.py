"""
===================================================
Core infrastructure package for the provisioner.
===================================================

Configuration, logging and the database engine catalog shared by every
other package.

Modules:
    config: Immutable provisioning configuration loaded from .env
    engines: Catalog of supported engines and their SQL dialects
    logger: Centralized logging configuration and utilities

Example:
    >>> from core.config import ProvisionConfig
    >>> from core.engines import lookup
    >>> from core.logger import get_logger
"""

__version__ = "0.1.0"
__all__ = [
    'ConfigurationError', 'ProvisionConfig', 'parse_engine_list',
    'Engine', 'UnknownEngineError', 'lookup', 'supported_engines',
    'get_logger', 'setup_logging'
]

from core.config import ConfigurationError, ProvisionConfig, parse_engine_list
from core.engines import Engine, UnknownEngineError, lookup, supported_engines
from core.logger import get_logger, setup_logging
