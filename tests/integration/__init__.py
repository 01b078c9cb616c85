"""Integration tests for the HTTP API.

Exercises the FastAPI application end to end through httpx with the
assistant service wired to the fake model backend.
"""
