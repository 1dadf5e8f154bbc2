"""Configuration for the Splunk SDK."""

from .settings import Settings

__all__ = ["Settings"]
