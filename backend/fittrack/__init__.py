"""Fitness Tracker backend."""
