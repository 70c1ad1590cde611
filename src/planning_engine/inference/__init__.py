"""Keyword and phase inference from free text."""
