"""Shared test fixtures for the modulith_interfaces test suite."""
