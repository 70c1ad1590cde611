"""Temporal and recovery safety checks."""
