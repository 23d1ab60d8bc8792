"""Test support utilities for runindex tests."""
