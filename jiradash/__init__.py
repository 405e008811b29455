"""Jira dashboard: proxy gateway and client-side issue derivation."""

__version__ = "1.0.0"
