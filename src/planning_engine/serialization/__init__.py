"""JSON-ready rendering of engine outputs."""
