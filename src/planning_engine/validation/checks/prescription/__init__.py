"""Discipline prescription checks."""
