"""Scheduling context construction."""
