"""Splunk REST API client SDK.

This package provides an async transport for the Splunk management
API (:class:`Context`) and a cached entity abstraction
(:class:`Entity`) that materializes resources from Atom feeds and
entries, refreshes them with a bounded retry, and offers typed field
access.

:var __version__: Current package version
:type __version__: str
"""

from .context import SCHEMES, Context, Protocol
from .entity import REFRESH_ATTEMPTS, REFRESH_DELAY, Entity, get_value
from .exceptions import (
    ArgumentError,
    ConversionError,
    InvalidOperationError,
    RequestError,
    SplunkSDKError,
    UnimplementedError,
)
from .models import AtomEntry, AtomFeed, Namespace, ResourceName
from .resources import DispatchState, Job, SavedSearch
from .utils.security import setup_secure_logging

__version__ = "0.1.0"

__all__ = [
    "SCHEMES",
    "REFRESH_ATTEMPTS",
    "REFRESH_DELAY",
    "ArgumentError",
    "AtomEntry",
    "AtomFeed",
    "Context",
    "ConversionError",
    "DispatchState",
    "Entity",
    "InvalidOperationError",
    "Job",
    "Namespace",
    "Protocol",
    "RequestError",
    "ResourceName",
    "SavedSearch",
    "SplunkSDKError",
    "UnimplementedError",
    "get_value",
    "setup_secure_logging",
]
