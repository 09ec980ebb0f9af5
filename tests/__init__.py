"""
Test suite for Fibre Monitor.

This package contains:
- Unit tests for individual components
- Integration tests for the complete data pipeline
- Stub generators for deterministic testing
"""
