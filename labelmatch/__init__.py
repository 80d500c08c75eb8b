"""Fuzzy reconciliation of free-text product labels against a master catalog."""
