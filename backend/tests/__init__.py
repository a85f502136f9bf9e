"""
Study Goals Test Suite

Test Structure:
    tests/
    ├── conftest.py                    # Shared fixtures and configuration
    ├── unit/                          # Unit tests (no external services)
    │   ├── test_config.py             # Settings and YAML loading
    │   ├── test_date_utils.py         # Day normalization
    │   ├── test_goal_resolution.py    # Goal snapshot resolution
    │   ├── test_daily_status.py       # Daily aggregation
    │   ├── test_streak_tracking.py    # Streak calculation
    │   ├── test_time_tracking.py      # TimeTrackingService (mocked db)
    │   ├── test_legacy_migration.py   # Legacy store migration
    │   ├── test_db_session.py         # get_db() unit of work
    │   └── test_tracking_models.py    # Pydantic models
    └── integration/                   # Real PostgreSQL test databases
        ├── test_tracking_flow.py      # Services sharing one session
        └── test_legacy_migration.py   # Legacy store to current store

Running Tests:
    # Run all tests
    pytest backend/tests/ -v

    # Unit tests only
    pytest backend/tests/ -m "not integration" -v

    # Run with coverage
    pytest backend/tests/ --cov=goals --cov-report=html
"""
