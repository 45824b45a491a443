"""Domain model and services for open-order reconciliation."""
