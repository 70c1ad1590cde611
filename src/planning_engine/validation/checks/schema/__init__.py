"""Per-session schema checks."""
