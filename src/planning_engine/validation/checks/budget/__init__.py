"""Weekly budget checks."""
