"""Habit anchor derivation from activity history."""
