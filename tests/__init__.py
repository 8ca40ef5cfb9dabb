"""Test package for Groq Terminal.

Provides coverage for all components with unit tests for isolated logic
and integration tests for workflows.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests
    - fakes.py: Scripted completions client for controller tests

Leverages pytest with pytest-check for soft assertions.
"""
