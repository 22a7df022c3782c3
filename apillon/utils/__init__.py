"""Utilities for apillon package."""
