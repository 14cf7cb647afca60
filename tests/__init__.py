#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Skip the SQLite-backed repository tests
    python -m pytest tests/ -v -m "not db"

    # Using unittest
    python -m unittest discover tests -v

Database tests use an in-memory SQLite database created per test; no
external service is needed.
"""
