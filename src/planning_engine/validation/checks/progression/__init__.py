"""Generic progression trace checks."""
