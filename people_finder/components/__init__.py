"""Atomic components."""
