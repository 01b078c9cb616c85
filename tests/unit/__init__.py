"""Unit tests for individual components in isolation.

Coverage:
    - agent/: Retry policy, usage tracking, context formatting, research,
      conversation, drafting, configuration and backend normalization
    - parsing/: Document ingestion and validation

Uses the fake backend from tests.fakes or patched Agno classes.
"""
