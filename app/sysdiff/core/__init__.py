"""Core reconciliation logic, configuration and ignore rules."""
