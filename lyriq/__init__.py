"""Lyriq: backend for a multi-tenant AI contact center."""

__version__ = "0.1.0"
