"""Shared utilities: HTTP plumbing and log sanitization."""
