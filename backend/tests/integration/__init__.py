"""
Integration Tests

Integration tests run against real PostgreSQL test databases: the current
store and a separate legacy store. Tables are recreated for every test.

Run with: pytest backend/tests/integration/ -m integration -v
"""
