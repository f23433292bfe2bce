"""
Test suite for Photo Sheet.

This package contains unit tests and HTTP integration tests for the
cropping and print sheet composition engine.
"""
