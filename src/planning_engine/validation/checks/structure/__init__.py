"""Top-level plan shape checks."""
