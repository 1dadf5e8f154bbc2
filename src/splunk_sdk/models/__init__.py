"""Splunk SDK models package.

This package contains the addressing models (namespaces and resource
names) and the Atom document models returned by the REST API.
"""

from .atom import AtomEntry, AtomFeed, parse_document, read_entry
from .namespace import WILDCARD, Namespace, ResourceName

__all__ = [
    "AtomEntry",
    "AtomFeed",
    "Namespace",
    "ResourceName",
    "WILDCARD",
    "parse_document",
    "read_entry",
]
