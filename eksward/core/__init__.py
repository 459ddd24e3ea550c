"""Polling primitive and exception hierarchy."""
