"""Strength-specific progression checks."""
