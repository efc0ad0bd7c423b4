"""Unit tests for the database layer in lyriq/core/database.

Repositories run against an in-memory SQLite database created from the
entity metadata, so queries are exercised for real.
"""
