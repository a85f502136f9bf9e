"""
Unit Tests

Unit tests run in isolation without external dependencies.
The database session is mocked; ORM records are built in memory.

These tests are fast and can run without PostgreSQL running.
"""
