"""Integration tests for ShatterScan.

These tests run the full pipeline and CLI on synthetic cohorts and are
separated from unit tests to allow for faster CI runs.

Run with: pytest tests/integration/ -v
"""
