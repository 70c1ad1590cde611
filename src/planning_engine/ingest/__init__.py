"""Provider activity mapping."""
