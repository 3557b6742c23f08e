"""
Conflict Viz Test Suite

This package contains unit tests, integration tests, and fixtures
for the Conflict Viz chart suite.

Run tests with:
    pytest tests/
    pytest tests/test_dispatcher.py -v
    pytest tests/test_run.py::TestParseArgs -v
"""
