"""Payments service business logic (payment attempts, reconciliation)."""
