"""
REST API adapter for the Amara subtitling platform
Provides routing, pagination and retry components plus a per-resource client
"""

import logging

from .errors import (
    AmaraAPIError,
    ConfigurationError,
    EnvironmentVariableError,
    InvalidAPIKeyError,
    InvalidAPISettingsError,
    InvalidArgumentError,
    InvalidCallbackError,
    InvalidLoggerError,
    MalformedPageError,
    MissingParameterError,
    RetriesExhaustedError,
    UnknownResourceError,
    UnsupportedMethodError,
)
from .config_loader import ConfigLoader, AdapterConfig
from .credentials import Credentials
from .http_client import HTTPClient, APIRequest, APIResponse
from .resource_router import ResourceDescriptor, RESOURCE_TEMPLATES, get_resource_url
from .pagination_strategy import OffsetLimitPagination, PageFilter
from .resource_fetcher import ResourceFetcher
from .logging_config import LeveledLogger, configure_logging
from .client import AmaraAPI

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.23.0'

__all__ = [
    'AmaraAPI',
    'AmaraAPIError',
    'ConfigurationError',
    'EnvironmentVariableError',
    'InvalidAPIKeyError',
    'InvalidAPISettingsError',
    'InvalidArgumentError',
    'InvalidCallbackError',
    'InvalidLoggerError',
    'MalformedPageError',
    'MissingParameterError',
    'RetriesExhaustedError',
    'UnknownResourceError',
    'UnsupportedMethodError',
    'ConfigLoader',
    'AdapterConfig',
    'Credentials',
    'HTTPClient',
    'APIRequest',
    'APIResponse',
    'ResourceDescriptor',
    'RESOURCE_TEMPLATES',
    'get_resource_url',
    'OffsetLimitPagination',
    'PageFilter',
    'ResourceFetcher',
    'LeveledLogger',
    'configure_logging',
]
