"""Utilities shared by pwaland jobs."""
