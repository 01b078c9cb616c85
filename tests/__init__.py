"""Test package for legalbrief.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP API workflow tests
    - fakes.py: In-memory model backend and recording sleep

No test talks to a real model API. Leverages pytest with pytest-check for
soft assertions and pytest-asyncio for coroutine tests.
"""
